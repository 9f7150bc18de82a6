"""Seed demo accounts and sample posts."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from authentication.managers import UserManager
from posts.models import Post

DEMO_USERS = {
    "admin": ("admin@example.com", "Admin", "AdminPass1!"),
    "author": ("author@example.com", "Ada Author", "AuthorPass1!"),
    "subscriber": ("reader@example.com", "Rea Reader", "ReaderPass1!"),
}

DEMO_POSTS = [
    (
        "author",
        "hello-world",
        "Hello World",
        "<p>Welcome to the blog. This is the <strong>first</strong> post.</p>",
        True,
    ),
    (
        "author",
        "writing-with-images",
        "Writing With Images",
        "Attach images from the editor and they land at the end of the post.",
        True,
    ),
    (
        "author",
        "unfinished-thoughts",
        "Unfinished Thoughts",
        "Drafts stay private until they are published.",
        False,
    ),
    (
        "admin",
        "site-announcements",
        "Site Announcements",
        "News about the platform itself.",
        True,
    ),
]


def create_seed_users() -> dict:
    """Create the demo accounts if missing and return a role->User map."""
    User = get_user_model()
    users = {}
    for role, (email, name, password) in DEMO_USERS.items():
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={
                "name": name,
                "role": role,
                "password_hash": UserManager.hash_password(password),
            },
        )
        users[role] = user
    return users


def create_seed_posts(users: dict) -> list:
    """Create the sample posts for the seeded authors."""
    posts = []
    for owner, slug, title, content, published in DEMO_POSTS:
        post, _ = Post.objects.get_or_create(
            slug=slug,
            defaults={
                "title": title,
                "content": content,
                "published": published,
                "author": users[owner],
            },
        )
        posts.append(post)
    return posts


class Command(BaseCommand):
    """Management command to seed demo users and posts."""

    help = "Seed demo users and sample posts. Use --reset to clear previously seeded data first."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users (and, by cascade, their posts) before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding blog data...")
        users = create_seed_users()
        posts = create_seed_posts(users)
        self.stdout.write(self.style.SUCCESS(f"Blog seed completed: {len(users)} users, {len(posts)} posts."))

    def _reset_seeded_data(self) -> None:
        self.stdout.write("Resetting previously seeded blog data...")
        User = get_user_model()
        emails = [email for email, _, _ in DEMO_USERS.values()]
        Post.objects.filter(slug__in=[slug for _, slug, _, _, _ in DEMO_POSTS]).delete()
        User.objects.filter(email__in=emails).delete()
        self.stdout.write(self.style.WARNING("Seeded blog data cleared."))
