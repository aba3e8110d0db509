"""
Storefront Pages

Minimal HTML for each state a visitor can be in. Values interpolated into
the markup are escaped; the navigation links are fixed strings.
"""

from html import escape
from typing import Dict, List, Optional

NAV_LINKS: Dict[str, str] = {
    "Women": "/women",
    "Men": "/men",
    "Kids": "/kids",
}


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Hello Socks - {escape(title)}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="text-align: center; margin-bottom: 30px;">
        <h1 style="color: rgb(23, 23, 130);">Hello Socks</h1>
    </div>
{body}
</body>
</html>
"""


def login_or_sign_up(login_path: str) -> str:
    """Anonymous homepage with the magic link form."""
    return _layout(
        "Log in or sign up",
        f"""    <h2>Log in or sign up</h2>
    <p>Enter your email and we will send you a sign-in link.</p>
    <form method="post" action="{escape(login_path)}">
        <input type="email" name="email" placeholder="you@example.com" required>
        <button type="submit">Continue with email</button>
    </form>""",
    )


def _nav() -> str:
    links = " | ".join(
        f'<a href="{escape(href)}">{escape(name)}</a>' for name, href in NAV_LINKS.items()
    )
    return f"    <nav>{links}</nav>"


def logged_in(email: Optional[str], logout_path: str) -> str:
    """Authenticated homepage."""
    return _layout(
        "Welcome",
        f"""{_nav()}
    <h2>Welcome back</h2>
    <p>You are logged in as <strong>{escape(email or "unknown")}</strong>.</p>
    <p><a href="{escape(logout_path)}">Log out</a></p>""",
    )


def email_sent() -> str:
    return _layout(
        "Check your email",
        """    <h2>Check your email</h2>
    <p>We sent you a sign-in link. It can only be used once.</p>""",
    )


def forbidden(message: Optional[str] = None) -> str:
    return _layout(
        "Forbidden",
        f"""    <h2>Access restricted</h2>
    <p>{escape(message or "This store is invite-only and your email is not on the list.")}</p>""",
    )


def error(message: Optional[str] = None) -> str:
    """Generic failure page. Never shows provider error details."""
    return _layout(
        "Something went wrong",
        f"""    <h2>Something went wrong</h2>
    <p>{escape(message or "Please try again in a moment.")}</p>
    <p><a href="/">Back to the homepage</a></p>""",
    )


def logged_out() -> str:
    return _layout(
        "Logged out",
        """    <h2>You have been logged out</h2>
    <p><a href="/">Log in again</a></p>""",
    )


def category(who: str, product_names: List[str]) -> str:
    """Product listing for one category, shown to logged-in visitors only."""
    items = "\n".join(f"        <li>{escape(name)}</li>" for name in product_names)
    return _layout(
        f"{who}'s socks",
        f"""{_nav()}
    <h2>{escape(who)}'s socks</h2>
    <ul>
{items}
    </ul>""",
    )
