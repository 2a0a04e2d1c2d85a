"""
HTML page templates for Questline.

Pages are plain f-string templates around a shared layout. Every value that
comes from the database or the request goes through ``_e`` before it is
interpolated. Forms submit JSON to the API with ``fetch`` and reload or
redirect on success.

Each page function returns a complete HTML document as a string.
"""

from __future__ import annotations

from html import escape
from typing import Any

# Color constants
BG_DARK = "#0F172A"
BG_CARD = "#1E293B"
ACCENT = "#22C55E"
TEXT_PRIMARY = "#F8FAFC"
TEXT_SECONDARY = "#94A3B8"
BORDER = "#334155"

APP_NAME = "Questline"

_FORM_SCRIPT = """\
<script>
async function submitJson(form, url, redirectTo) {
    const data = {};
    for (const [key, value] of new FormData(form).entries()) {
        if (value === "") continue;
        data[key] = form.elements[key].type === "number" ? Number(value) : value;
    }
    const res = await fetch(url, {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        credentials: "same-origin",
        body: JSON.stringify(data),
    });
    const body = await res.json();
    document.getElementById("message").textContent = body.message;
    if (body.success && redirectTo) window.location = redirectTo;
    return false;
}
async function postAction(url) {
    const res = await fetch(url, {method: "POST", credentials: "same-origin"});
    const body = await res.json();
    document.getElementById("message").textContent = body.message;
    if (body.success) setTimeout(() => window.location.reload(), 800);
}
</script>"""


def _e(value: Any) -> str:  # noqa: ANN401
    """Escape any value for HTML; ``None`` renders as an empty string."""
    return "" if value is None else escape(str(value))


def _base_layout(title: str, content: str, *, user_name: str | None = None) -> str:
    """Wrap page content in the shared layout with navigation."""
    if user_name is None:
        nav = '<a href="/login">Log in</a> <a href="/register">Register</a>'
    else:
        nav = (
            '<a href="/dashboard">Dashboard</a> '
            '<a href="/games/display">Games</a> '
            '<a href="/activity-log">Activity</a> '
            '<a href="/profile">Profile</a> '
            f'<a href="/logout">Log out ({_e(user_name)})</a>'
        )
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{_e(title)} | {APP_NAME}</title>
    <style>
        body {{ margin: 0; background: {BG_DARK}; color: {TEXT_PRIMARY}; font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; }}
        header {{ display: flex; justify-content: space-between; padding: 16px 32px; border-bottom: 1px solid {BORDER}; }}
        header a {{ color: {TEXT_SECONDARY}; margin-left: 16px; text-decoration: none; }}
        main {{ max-width: 760px; margin: 32px auto; padding: 0 16px; }}
        .card {{ background: {BG_CARD}; border: 1px solid {BORDER}; border-radius: 12px; padding: 24px; margin-bottom: 16px; }}
        .muted {{ color: {TEXT_SECONDARY}; }}
        .points {{ color: {ACCENT}; font-weight: 700; }}
        button {{ background: {ACCENT}; color: {BG_DARK}; border: 0; border-radius: 8px; padding: 10px 20px; font-weight: 600; cursor: pointer; }}
        input, textarea {{ display: block; width: 100%; margin: 6px 0 14px; padding: 8px; border-radius: 6px; border: 1px solid {BORDER}; background: {BG_DARK}; color: {TEXT_PRIMARY}; }}
        #message {{ color: {ACCENT}; min-height: 1.5em; }}
    </style>
</head>
<body>
    <header>
        <a href="/" style="color: {ACCENT}; font-weight: 700; margin: 0;">{APP_NAME}</a>
        <nav>{nav}</nav>
    </header>
    <main>
        <h1>{_e(title)}</h1>
        <p id="message"></p>
        {content}
    </main>
    {_FORM_SCRIPT}
</body>
</html>"""


def _card(body: str) -> str:
    return f'<div class="card">{body}</div>'


def _stat_list(stats: dict[str, Any]) -> str:
    items = "".join(
        f"<li>{_e(label.replace('_', ' ').capitalize())}: <strong>{_e(value)}</strong></li>"
        for label, value in stats.items()
    )
    return f"<ul>{items}</ul>"


def home_page(user_name: str | None) -> str:
    content = _card(
        "<p>Complete daily missions, pass quizzes, play games and volunteer "
        "to earn points on your onboarding journey.</p>"
        + ('<a href="/dashboard"><button>Go to dashboard</button></a>' if user_name else
           '<a href="/register"><button>Get started</button></a>')
    )
    return _base_layout("Welcome", content, user_name=user_name)


def register_page() -> str:
    form = """\
<form onsubmit="return submitJson(this, '/register', '/login')">
    <label>Name<input name="name" required></label>
    <label>Email<input name="email" type="email" required></label>
    <label>Age<input name="age" type="number" min="13" required></label>
    <label>Password<input name="password" type="password" required></label>
    <label>Confirm password<input name="confirmPassword" type="password" required></label>
    <button type="submit">Create account</button>
</form>"""
    return _base_layout("Register", _card(form))


def login_page() -> str:
    form = """\
<form onsubmit="return submitJson(this, '/login', '/dashboard')">
    <label>Email<input name="email" type="email" required></label>
    <label>Password<input name="password" type="password" required></label>
    <button type="submit">Log in</button>
</form>"""
    return _base_layout("Log in", _card(form))


def dashboard_page(
    user: dict[str, Any],
    missions: list[dict[str, Any]],
    quizzes: list[dict[str, Any]],
) -> str:
    """Points summary, today's missions and available quizzes."""
    mission_rows = []
    for mission in missions:
        if mission.get("completed_today"):
            action = '<span class="muted">Done today</span>'
        else:
            action = f"<button onclick=\"postAction('/missions/{int(mission['id'])}/complete')\">Complete</button>"
        mission_rows.append(
            _card(
                f"<h3>{_e(mission['title'])}</h3>"
                f'<p class="muted">{_e(mission.get("description"))}</p>'
                f'<p><span class="points">+{_e(mission["reward_points"])}</span> {action}</p>'
            )
        )
    quiz_rows = [
        _card(
            f'<h3><a href="/quizzes/{int(q["id"])}/details">{_e(q["title"])}</a></h3>'
            f'<p class="muted">{_e(q.get("description"))}</p>'
            f'<p><span class="points">+{_e(q["reward_points"])}</span> '
            f'<span class="muted">pass at {_e(q["passing_score"])}%</span></p>'
        )
        for q in quizzes
    ]
    content = (
        _card(f'<p>Total points: <span class="points">{_e(user["total_points"])}</span></p>'
              '<p><a href="/starting">Your journey</a></p>')
        + "<h2>Missions</h2>"
        + ("".join(mission_rows) or '<p class="muted">No missions yet.</p>')
        + "<h2>Quizzes</h2>"
        + ("".join(quiz_rows) or '<p class="muted">No quizzes yet.</p>')
    )
    return _base_layout("Dashboard", content, user_name=user["name"])


def profile_page(user: dict[str, Any]) -> str:
    details = _stat_list(
        {
            "name": user["name"],
            "email": user["email"],
            "age": user["age"],
            "total_points": user["total_points"],
            "member_since": user["created_at"],
        }
    )
    form = f"""\
<form onsubmit="return submitJson(this, '/profile/update', '/profile')">
    <label>Name<input name="name" value="{_e(user['name'])}"></label>
    <label>Age<input name="age" type="number" min="13" value="{_e(user['age'])}"></label>
    <label>Avatar URL<input name="avatar_url" value="{_e(user.get('avatar_url'))}"></label>
    <button type="submit">Save</button>
</form>
<p><button onclick="if (confirm('Delete your account?')) postAction('/profile/delete')">Delete account</button></p>"""
    return _base_layout("Profile", _card(details) + _card(form), user_name=user["name"])


def starting_page(user_name: str, starting: dict[str, Any] | None, progress: dict[str, Any]) -> str:
    if starting is None:
        body = """\
<form onsubmit="return submitJson(this, '/api/starting/create', '/starting')">
    <label>Title<input name="title" value="My Journey"></label>
    <label>Description<textarea name="description">Starting my onboarding journey</textarea></label>
    <button type="submit">Start journey</button>
</form>"""
    else:
        body = (
            f"<h2>{_e(starting['title'])}</h2>"
            f'<p class="muted">{_e(starting["description"])}</p>'
            f"<p>Status: <strong>{_e(starting['status'])}</strong> since {_e(starting['start_date'])}</p>"
            '<p><a href="/ending">Finish your journey</a></p>'
        )
    return _base_layout("Your Journey", _card(body) + _card(_stat_list(progress)), user_name=user_name)


def ending_page(user_name: str, ending: dict[str, Any] | None) -> str:
    if ending is None:
        body = """\
<form onsubmit="return submitJson(this, '/api/ending/create', '/ending/summary/display')">
    <label>Title<input name="title" value="Journey Complete"></label>
    <label>Reflection<textarea name="description"></textarea></label>
    <button type="submit">Complete journey</button>
</form>"""
    else:
        body = ending_detail(ending)
    return _base_layout("Journey Ending", _card(body), user_name=user_name)


def ending_detail(ending: dict[str, Any]) -> str:
    return (
        f"<h2>{_e(ending['title'])}</h2>"
        f'<p class="muted">{_e(ending.get("description"))}</p>'
        f"<p>Completed on {_e(ending['completion_date'])}</p>"
        '<p><a href="/ending/summary/display">View summary</a></p>'
    )


def ending_detail_page(user_name: str, ending: dict[str, Any]) -> str:
    return _base_layout("Journey Ending", _card(ending_detail(ending)), user_name=user_name)


def ending_summary_page(user_name: str, summary: dict[str, Any]) -> str:
    return _base_layout("Journey Summary", _card(_stat_list(summary)), user_name=user_name)


def quiz_details_page(user_name: str, quiz: dict[str, Any], questions: list[dict[str, Any]]) -> str:
    """Quiz form. Answers are posted as ``{answers: {questionId: letter}}``."""
    blocks = []
    for question in questions:
        qid = int(question["id"])
        options = "".join(
            f'<label><input type="radio" name="q{qid}" value="{letter}" style="display:inline;width:auto"> '
            f"{letter}. {_e(question[f'option_{letter.lower()}'])}</label><br>"
            for letter in "ABCD"
            if question.get(f"option_{letter.lower()}")
        )
        blocks.append(_card(f'<p data-question="{qid}">{_e(question["question_text"])}</p>{options}'))
    script = f"""\
<script>
async function submitQuiz(form) {{
    const answers = {{}};
    for (const el of form.querySelectorAll("[data-question]")) {{
        const id = el.dataset.question;
        const picked = form.querySelector(`input[name="q${{id}}"]:checked`);
        if (picked) answers[id] = picked.value;
    }}
    const res = await fetch("/quizzes/{int(quiz['id'])}/submit", {{
        method: "POST",
        headers: {{"Content-Type": "application/json"}},
        credentials: "same-origin",
        body: JSON.stringify({{answers}}),
    }});
    const body = await res.json();
    document.getElementById("message").textContent = body.message;
    if (body.success) window.location = "/quizzes/{int(quiz['id'])}/result/display";
    return false;
}}
</script>"""
    content = (
        _card(
            f'<p class="muted">{_e(quiz.get("description"))}</p>'
            f'<p>Reward <span class="points">{_e(quiz["reward_points"])}</span> points, '
            f"pass at {_e(quiz['passing_score'])}%</p>"
        )
        + '<form onsubmit="return submitQuiz(this)">'
        + "".join(blocks)
        + '<button type="submit">Submit answers</button></form>'
        + script
    )
    return _base_layout(quiz["title"], content, user_name=user_name)


def quiz_result_page(user_name: str, result: dict[str, Any]) -> str:
    verdict = "Passed" if result["passed"] else "Not passed"
    body = (
        f"<h2>{verdict}</h2>"
        f'<p>Score: <span class="points">{_e(result["score"])}%</span> '
        f"({_e(result['correct_answers'])} of {_e(result['total_questions'])} correct)</p>"
        f"<p>Points earned: {_e(result['reward_earned'])}</p>"
        '<p><a href="/dashboard">Back to dashboard</a></p>'
    )
    return _base_layout(f"Result: {result['quiz_title']}", _card(body), user_name=user_name)


def games_page(user_name: str, games: list[dict[str, Any]]) -> str:
    cards = [
        _card(
            f'<h3><a href="/games/{int(g["id"])}/details">{_e(g["title"])}</a></h3>'
            f'<p class="muted">{_e(g.get("genre"))} / {_e(g.get("difficulty_level"))}</p>'
            f'<p><span class="points">+{_e(g["reward_points"])}</span></p>'
        )
        for g in games
    ]
    return _base_layout("Games", "".join(cards) or '<p class="muted">No games yet.</p>', user_name=user_name)


def game_details_page(user_name: str, game: dict[str, Any]) -> str:
    gid = int(game["id"])
    rating_buttons = "".join(
        f"<button onclick=\"rateGame({n})\" style=\"margin-right:4px\">{n}</button>" for n in range(1, 6)
    )
    script = f"""\
<script>
async function rateGame(rating) {{
    const res = await fetch("/games/{gid}/rate", {{
        method: "POST",
        headers: {{"Content-Type": "application/json"}},
        credentials: "same-origin",
        body: JSON.stringify({{rating}}),
    }});
    const body = await res.json();
    document.getElementById("message").textContent = body.message;
}}
</script>"""
    body = (
        f'<p class="muted">{_e(game.get("description"))}</p>'
        + _stat_list(
            {
                "genre": game.get("genre"),
                "difficulty": game.get("difficulty_level"),
                "reward_points": game["reward_points"],
                "total_completions": game["total_completions"],
                "average_rating": game["average_rating"],
            }
        )
        + f"<p><button onclick=\"postAction('/games/{gid}/complete')\">Mark as played</button></p>"
        + f"<p>Rate: {rating_buttons}</p>"
    )
    return _base_layout(game["title"], _card(body) + script, user_name=user_name)


def activity_log_page(
    user_name: str,
    summary: dict[str, Any],
    activities: list[dict[str, Any]],
) -> str:
    items = "".join(
        f"<li>{_e(a['title'])} <span class=\"muted\">{_e(a['created_at'])}</span></li>" for a in activities
    )
    content = _card(_stat_list(summary)) + _card(
        "<h2>Recent activity</h2>" + (f"<ul>{items}</ul>" if items else '<p class="muted">Nothing yet.</p>')
    )
    return _base_layout("Activity Log", content, user_name=user_name)


def not_found_page() -> str:
    body = '<p>The page you were looking for does not exist.</p><p><a href="/">Go home</a></p>'
    return _base_layout("Page not found", _card(body))
