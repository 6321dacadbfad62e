# cms/frontend.py
"""
Server-rendered pages:
- Public pages (home, blog post shell)
- Admin pages (each render mounts the scheduler bootstrapper)

Every page goes through base.html, which applies the theme settings.
"""

from flask import (
    Blueprint,
    current_app,
    render_template,
    request,
)

from .bootstrap import SchedulerBootstrapper, http_poster

frontend_bp = Blueprint("frontend", __name__)


def mount_scheduler_bootstrapper():
    """One bootstrapper per rendered page; only admin paths trigger a POST."""
    post = http_poster(request.host_url, dict(request.cookies))
    bootstrapper = SchedulerBootstrapper(
        post,
        init_url=current_app.config.get("SCHEDULER_INIT_URL", "/api/admin/scheduler/init"),
    )
    return bootstrapper.mount(request.path)


def render_page(template: str, **context):
    mount_scheduler_bootstrapper()
    return render_template(template, **context)


@frontend_bp.get("/")
def home():
    return render_page("home.html")


@frontend_bp.get("/blog/<slug>")
def blog_post(slug: str):
    return render_page("blog_post.html", slug=slug)


@frontend_bp.get("/admin")
@frontend_bp.get("/admin/<path:section>")
def admin_page(section: str = "dashboard"):
    return render_page("admin/index.html", section=section)
