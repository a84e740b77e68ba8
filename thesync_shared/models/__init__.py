from thesync_shared.models.user import CurrentUser
from thesync_shared.models.response import BaseResponse

__all__ = ["CurrentUser", "BaseResponse"]
