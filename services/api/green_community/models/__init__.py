"""SQLAlchemy ORM models.

Models represent database tables:
- users / sessions / profiles: accounts, login sessions, public profiles + points
- communities / community_memberships: topic groups and membership join-table
- stories / blogs (+ likes, comments): user content
- challenges / challenge_completions: points economy
- shops / products / shopping_cart / orders / order_items / payments: marketplace
"""

from green_community.models.user import Profile, User, UserSession
from green_community.models.community import Community, CommunityCategory, CommunityMembership
from green_community.models.story import Story, StoryComment, StoryLike
from green_community.models.blog import Blog, BlogComment, BlogLike
from green_community.models.challenge import Challenge, ChallengeCompletion
from green_community.models.shop import Product, Shop
from green_community.models.order import CartItem, Order, OrderItem, OrderStatus, Payment, PaymentMethod

__all__ = [
    "User",
    "UserSession",
    "Profile",
    "Community",
    "CommunityCategory",
    "CommunityMembership",
    "Story",
    "StoryLike",
    "StoryComment",
    "Blog",
    "BlogLike",
    "BlogComment",
    "Challenge",
    "ChallengeCompletion",
    "Shop",
    "Product",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
]
