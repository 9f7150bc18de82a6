"""Ownership rules for posts.

``is_owner`` is the single source of truth for "may this user change this
post". Services enforce it; serializers reuse it only to decide whether to
show edit/delete affordances.
"""


def is_owner(user, post) -> bool:
    return bool(
        user is not None
        and getattr(user, "is_authenticated", False)
        and post.author_id == user.pk
    )


def can_view(user, post) -> bool:
    """Published posts are public; drafts are visible to their author only."""
    return post.published or is_owner(user, post)


__all__ = ["can_view", "is_owner"]
