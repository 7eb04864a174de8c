from .admin import Admin  # noqa: F401
from .member import Member  # noqa: F401
from .attendance import AttendanceRecord  # noqa: F401
from .fee import FeeRecord  # noqa: F401
from .activity import Activity  # noqa: F401
from .chat import ChatMessage  # noqa: F401
from .notification import Notification, NotificationRead  # noqa: F401
from .setting import Setting  # noqa: F401
from .password_reset import PasswordResetToken  # noqa: F401
