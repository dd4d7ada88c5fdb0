"""
Server-rendered pages.

Thin shells only: each page is gated by session and role, everything else
is fetched from the JSON API by the browser.
"""

import json
from html import escape
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from auth import Principal
from dependencies import require_admin_page, require_hr_page, require_page_session

router = APIRouter(tags=["Pages"], include_in_schema=False)


def _page(title: str, body: str) -> HTMLResponse:
    html = f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{escape(title)} | Dayflow</title></head>
<body>
<h1>{escape(title)}</h1>
{body}
</body>
</html>"""
    return HTMLResponse(html)


def same_site_path(target: str) -> str:
    """Return target if it is a path on this site, otherwise an empty string."""
    if not target.startswith("/") or "\\" in target or any(ord(c) < 0x20 for c in target):
        return ""
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return ""
    return target


_LOGIN_FORM = """<form id="login">
  <input name="identifier" placeholder="Email or Login ID" required>
  <input name="password" type="password" placeholder="Password" required>
  <button type="submit">Sign in</button>
</form>
<p id="error"></p>
<script>
document.getElementById("login").addEventListener("submit", async (event) => {
  event.preventDefault();
  const form = new FormData(event.target);
  const identifier = form.get("identifier");
  const body = identifier.includes("@")
    ? {email: identifier, password: form.get("password")}
    : {loginId: identifier, password: form.get("password")};
  const res = await fetch("/auth/login", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify(body),
  });
  const data = await res.json();
  if (!res.ok) {
    document.getElementById("error").textContent = data.detail;
    return;
  }
  window.location = %(redirect)s || data.redirectUrl;
});
</script>"""


@router.get("/", response_class=HTMLResponse)
def home():
    return _page("Dayflow HRM", '<p><a href="/auth/login">Sign in</a></p>')


@router.get("/auth/login", response_class=HTMLResponse)
def login_page(redirect: str = Query("")):
    target = same_site_path(redirect)
    # "</" must not close the script element
    literal = json.dumps(target).replace("<", "\\u003c")
    return _page("Sign in", _LOGIN_FORM % {"redirect": literal})


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(principal: Principal = Depends(require_page_session)):
    return _page("Dashboard", f'<p data-user-id="{principal.user_id}">Signed in as {principal.role.value}</p>')


@router.get("/admin", response_class=HTMLResponse)
def admin_page(principal: Principal = Depends(require_admin_page)):
    return _page("Admin", '<p>Employees, leave approvals and payroll.</p>')


@router.get("/hr", response_class=HTMLResponse)
def hr_page(principal: Principal = Depends(require_hr_page)):
    return _page("HR", '<p>Employee directory and attendance overview.</p>')
