"""Models package."""

from .user import User
from .video import Video
from .watch_history import WatchHistoryEntry
from .tweet import Tweet
from .comment import Comment
from .like import Like
from .subscription import Subscription
from .playlist import Playlist, PlaylistVideo
from .password_reset_token import PasswordResetToken
