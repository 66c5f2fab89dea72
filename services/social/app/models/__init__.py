from app.accounts.models import Account
from app.moderation.models import Report
from app.posts.models import Comment, Post
from app.social_graph.models import Follow

__all__ = ["Account", "Comment", "Follow", "Post", "Report"]
