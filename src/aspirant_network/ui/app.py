"""
Streamlit front end for Aspirant Network.

Run with ``streamlit run src/aspirant_network/ui/app.py``. The session,
exam selection and page objects live in ``st.session_state`` so they survive
reruns; every page goes through the same route guards the client exposes.
"""

from typing import Dict

import streamlit as st

from aspirant_network.api import AspirantAPI, AspirantAPIClient, APIError
from aspirant_network.config import get_settings
from aspirant_network.errors import AuthError, ExamSelectionError
from aspirant_network.models import VoteType, ref_name
from aspirant_network.notifications import ToastQueue, ToastVariant
from aspirant_network.pages import PROFILE_TABS, ActivityFeed, Feed, ProfileActivity
from aspirant_network.session import (
    HOME_PATH,
    LOGIN_PATH,
    AuthSession,
    ExamSession,
    RouteDecision,
    resolve_route,
)
from aspirant_network.storage import JsonFileStore
from aspirant_network.sync import OptimisticUpdater
from aspirant_network.utils.logging import get_logger, setup_logging

logger = get_logger("ui")

PAGES: Dict[str, str] = {
    HOME_PATH: "🏠 Feed",
    "/activities": "🔔 Activity",
    "/profile": "👤 Profile",
}

TOAST_ICONS = {
    ToastVariant.SUCCESS: "✅",
    ToastVariant.ERROR: "⚠️",
    ToastVariant.DEFAULT: "ℹ️",
}


def setup_page_config() -> None:
    """Configure Streamlit page settings."""
    st.set_page_config(
        page_title="Aspirant Network",
        page_icon="🎓",
        layout="wide",
        initial_sidebar_state="expanded"
    )


def initialize_session_state() -> None:
    """Initialize Streamlit session state variables."""
    if "auth" not in st.session_state:
        settings = get_settings()
        auth = AuthSession(JsonFileStore(settings.storage_path))
        auth.hydrate()
        toasts = ToastQueue()
        client = AspirantAPIClient(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
            auth_header=auth.get_auth_header,
        )
        st.session_state.auth = auth
        st.session_state.exam = ExamSession(auth)
        st.session_state.toasts = toasts
        st.session_state.api = AspirantAPI(client)
        st.session_state.updater = OptimisticUpdater(toasts=toasts)

    if "path" not in st.session_state:
        st.session_state.path = HOME_PATH


def navigate(path: str) -> None:
    st.session_state.path = path
    st.rerun()


def show_toasts() -> None:
    for toast in st.session_state.toasts.drain():
        text = f"**{toast.title}**"
        if toast.description:
            text += f" {toast.description}"
        st.toast(text, icon=TOAST_ICONS[toast.variant])


def handle_api_error(e: APIError) -> None:
    if e.is_unauthorized:
        logger.warning("API rejected the session token")
        st.error(f"{e.message}. Your session may have expired, please log out and sign in again.")
        return
    st.error(e.message)


def render_login() -> None:
    st.title("🎓 Aspirant Network")
    st.markdown("**Sign in to your exam community**")

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if not submitted:
        return

    api: AspirantAPI = st.session_state.api
    try:
        response = api.auth.login(email, password)
        st.session_state.auth.login(response.get("user") or {}, response.get("token") or "")
    except APIError as e:
        st.error(e.message)
        return
    except AuthError as e:
        st.error(f"Login failed: {e.message}")
        return

    st.session_state.toasts.success("Welcome back!", st.session_state.auth.user.name)
    navigate(HOME_PATH)


def render_sidebar() -> str:
    auth: AuthSession = st.session_state.auth
    exam: ExamSession = st.session_state.exam

    st.sidebar.title("🎓 Aspirant Network")
    st.sidebar.markdown(f"Signed in as **@{auth.user.username}**")

    exams = exam.get_available_exams()
    if exam.can_switch_exam():
        selected = st.sidebar.radio(
            "Current exam",
            options=exams,
            index=exams.index(exam.current_exam) if exam.current_exam in exams else 0,
        )
        if not exam.is_active_exam(selected):
            try:
                exam.switch_exam(selected)
            except ExamSelectionError as e:
                st.sidebar.error(e.message)
            st.session_state.pop("feed", None)
    else:
        st.sidebar.markdown(f"Current exam: **{exam.current_exam}**")

    choice = st.sidebar.radio(
        "Go to",
        options=list(PAGES),
        format_func=PAGES.get,
        index=list(PAGES).index(st.session_state.path) if st.session_state.path in PAGES else 0,
    )

    if st.sidebar.button("Log out"):
        auth.logout()
        for key in ("feed", "activity", "profile"):
            st.session_state.pop(key, None)
        navigate(LOGIN_PATH)

    return choice


def render_feed() -> None:
    exam: ExamSession = st.session_state.exam
    st.title(f"📚 {exam.current_exam} Questions")

    if "feed" not in st.session_state:
        feed = Feed(st.session_state.api, exam, st.session_state.updater, page_size=get_settings().default_page_size)
        with st.spinner("Loading questions..."):
            feed.load()
        st.session_state.feed = feed
    feed: Feed = st.session_state.feed

    if feed.error:
        st.error(feed.error)
    if not feed.items:
        st.info("No questions yet for this exam.")

    for question in feed.items:
        with st.container(border=True):
            st.markdown(f"### {question.title}")
            tags = [name for name in (ref_name(question.subject), ref_name(question.topic)) if name]
            if question.is_solved:
                tags.append("✅ Solved")
            if tags:
                st.caption(" · ".join(tags))
            col1, col2, col3, col4 = st.columns([1, 1, 1, 4])
            with col1:
                if st.button(f"▲ {question.upvotes}", key=f"up-{question.id}"):
                    feed.vote(question.id, VoteType.UP)
                    st.rerun()
            with col2:
                if st.button(f"▼ {question.downvotes}", key=f"down-{question.id}"):
                    feed.vote(question.id, VoteType.DOWN)
                    st.rerun()
            with col3:
                label = "★ Saved" if question.has_saved else "☆ Save"
                if st.button(label, key=f"save-{question.id}"):
                    feed.toggle_save(question.id)
                    st.rerun()

    if feed.pagination.has_next and st.button("Next page"):
        feed.next_page()
        st.rerun()


def render_activity() -> None:
    st.title("🔔 Activity")

    if "activity" not in st.session_state:
        activity = ActivityFeed(st.session_state.api, st.session_state.updater)
        with st.spinner("Loading activity..."):
            activity.load()
        st.session_state.activity = activity
    activity: ActivityFeed = st.session_state.activity

    if activity.error:
        st.error(activity.error)

    col1, col2 = st.columns([3, 1])
    with col1:
        st.markdown(f"**{activity.unread_count}** unread")
    with col2:
        if activity.unread_count and st.button("Mark all as read"):
            activity.mark_all_read()
            st.rerun()

    for item in activity.activities:
        marker = "" if item.is_read else "🔵 "
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(f"{marker}{item.message or item.type}")
        with col2:
            if not item.is_read and st.button("Mark read", key=f"read-{item.id}"):
                activity.mark_read(item.id)
                st.rerun()


def render_profile() -> None:
    auth: AuthSession = st.session_state.auth
    user = auth.user
    st.title(f"👤 {user.name}")
    st.caption(f"@{user.username} · {user.primary_exam}")

    if "profile" not in st.session_state:
        profile = ProfileActivity(st.session_state.api, st.session_state.updater, user.id, st.session_state.toasts)
        profile.load()
        st.session_state.profile = profile
    profile: ProfileActivity = st.session_state.profile

    tab = st.radio(
        "Show",
        options=list(PROFILE_TABS),
        index=PROFILE_TABS.index(profile.active_tab),
        format_func=lambda name: f"{name.title()} ({profile.counts[name]})",
        horizontal=True,
    )
    if tab != profile.active_tab:
        profile.load(tab)
        st.rerun()

    if profile.error:
        st.error(profile.error)
    if not profile.items:
        st.info(f"You have no {tab} yet.")

    for item in profile.items:
        item_id = item.get("_id")
        with st.container(border=True):
            st.markdown(item.get("title") or item.get("content") or item_id)
            col1, col2 = st.columns([1, 1])
            if tab == "questions":
                with col1:
                    label = "Mark unsolved" if item.get("isSolved") else "Mark solved"
                    if st.button(label, key=f"solve-{item_id}"):
                        profile.toggle_solved(item_id)
                        st.rerun()
            with col2:
                if st.button("Delete", key=f"delete-{item_id}"):
                    profile.delete(item_id)
                    st.rerun()


def apply_decision(decision: RouteDecision) -> bool:
    """Return True if the page may render."""
    if decision.loading:
        st.info("Loading...")
        return False
    if decision.redirect_to:
        navigate(decision.redirect_to)
    return decision.allowed


def main() -> None:
    """Main application."""
    setup_page_config()
    setup_logging()
    initialize_session_state()

    auth: AuthSession = st.session_state.auth
    path = st.session_state.path
    if not apply_decision(resolve_route(path, auth)):
        return

    try:
        if path == LOGIN_PATH:
            render_login()
        else:
            choice = render_sidebar()
            if choice != path:
                navigate(choice)
            if path == "/activities":
                render_activity()
            elif path == "/profile":
                render_profile()
            else:
                render_feed()
    except APIError as e:
        handle_api_error(e)

    show_toasts()


if __name__ == "__main__":
    main()
