from django.utils.html import escape


def annotate_url(base_url: str, task_id: int, seq: int = 1) -> str:
    return f"{base_url.rstrip('/')}/annotate/{task_id}?seq={seq}"


def task_assigned_html(email: str, url: str) -> str:
    """Body of the mail sent to an existing user bound to a new task."""
    return (
        f"Hello {escape(email)},<br />\n"
        f'You have been assigned to a new task. <a href="{escape(url)}">Click here</a> '
        "to start annotating this task."
    )


def invitation_html(email: str, url: str) -> str:
    return (
        f"Hello {escape(email)},<br />\n"
        "You have been invited to annotate documents on Lawnotation. "
        f'<a href="{escape(url)}">Accept the invitation</a> to get started.'
    )
