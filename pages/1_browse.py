"""
Browse page - navigate folders and download files.

SECURITY:
- The current folder comes from the ?path= query parameter (untrusted)
- Every folder and download goes through the resolver, never a raw join
- Rejections are audited; traversal attempts are logged as warnings
"""

import logging
import uuid

import streamlit as st
from dotenv import load_dotenv

from explorer.audit_log import (
    RequestTimer,
    generate_request_id,
    log_download,
    log_listing,
    log_rejection,
)
from explorer.errors import Rejected
from explorer.listing import list_directory
from explorer.logging_config import setup_logging
from explorer.policy import PolicyConfig, build_policy
from explorer.presentation import (
    FOLDER_ICON,
    breadcrumbs,
    format_file_size,
    icon_for,
    is_addressable,
    parent_of,
    split_entries,
    total_size,
)
from explorer.rate_limit import check_rate_limit, rules_from_settings
from explorer.resolver import resolve_directory, resolve_for_read
from explorer.settings import settings

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)


@st.cache_resource
def get_policy() -> PolicyConfig:
    """Process-wide policy, built once."""
    return build_policy(settings)


def _show_rejection(rejected: Rejected) -> None:
    text = rejected.message
    if settings.show_rejection_reasons:
        text = f"{text} ({rejected.reason.value})"
    st.error(f"❌ {text}")


def _navigate(relative: str) -> None:
    st.query_params["path"] = relative
    st.session_state.pop("download_path", None)
    st.rerun()


policy = get_policy()
rules = rules_from_settings(settings)

if "session_id" not in st.session_state:
    st.session_state["session_id"] = uuid.uuid4().hex[:16]
session_id = st.session_state["session_id"]

st.title("📂 Browse")

raw_path = st.query_params.get("path", "")

allowed, retry = check_rate_limit(st.session_state, rules["browse"])
if not allowed:
    st.warning(f"{rules['browse'].message} Retry in {retry}s.")
    st.stop()

request_id = generate_request_id()
with RequestTimer() as timer:
    directory = resolve_directory(settings.storage_dir, raw_path, policy)
    listing = directory if isinstance(directory, Rejected) else list_directory(directory, policy)

if isinstance(listing, Rejected):
    log_rejection(request_id, session_id, "list", raw_path, listing)
    _show_rejection(listing)
    if st.button("🏠 Back to root"):
        _navigate("")
    st.stop()

log_listing(request_id, session_id, raw_path, len(listing), timer.elapsed_ms)

# Breadcrumb navigation
crumbs = breadcrumbs(directory.relative)
cols = st.columns(len(crumbs) + 1)
for col, (label, target) in zip(cols, crumbs):
    with col:
        if st.button(label, key=f"crumb_{target}", use_container_width=True):
            _navigate(target)

folders, files = split_entries(sorted(listing, key=lambda e: e.name.lower()))
st.caption(
    f"{len(folders)} folder(s), {len(files)} file(s), {format_file_size(total_size(files))}"
)

if not directory.is_root:
    if st.button("⬆️ Parent folder"):
        _navigate(parent_of(directory.relative))

if not listing:
    st.info("This folder is empty.")

for entry in folders:
    if not is_addressable(entry.relative_path, policy):
        st.write(f"{FOLDER_ICON} {entry.name}")
        continue
    if st.button(f"{FOLDER_ICON} {entry.name}", key=f"dir_{entry.relative_path}"):
        _navigate(entry.relative_path)

for entry in files:
    col1, col2, col3 = st.columns([0.6, 0.2, 0.2])
    with col1:
        st.write(f"{icon_for(entry.name)} **{entry.name}**")
        st.caption(f"{entry.extension} · {entry.modified_at:%Y-%m-%d %H:%M} UTC")
    with col2:
        st.write(format_file_size(entry.size_bytes or 0))
    with col3:
        if not is_addressable(entry.relative_path, policy):
            st.caption("Unavailable")
        elif st.button("⬇️ Download", key=f"dl_{entry.relative_path}", use_container_width=True):
            st.session_state["download_path"] = entry.relative_path

# Download: resolved again from the relative path, as any client request would be
pending = st.session_state.get("download_path")
if pending:
    st.divider()
    ok, retry = check_rate_limit(st.session_state, rules["download"])
    if not ok:
        st.warning(f"{rules['download'].message} Retry in {retry}s.")
    else:
        request_id = generate_request_id()
        target = resolve_for_read(settings.storage_dir, pending, policy)
        if isinstance(target, Rejected):
            log_rejection(request_id, session_id, "download", pending, target)
            _show_rejection(target)
        else:
            try:
                data = target.path.read_bytes()
            except OSError:
                logger.exception("Download read failed", extra={"error_code": "DOWNLOAD_READ_ERROR"})
                st.error("❌ Storage error")
            else:
                log_download(request_id, session_id, pending, len(data))
                st.download_button(
                    f"💾 Save {target.path.name}",
                    data=data,
                    file_name=target.path.name,
                    mime="application/octet-stream",
                    key=f"save_{request_id}",
                )
    st.session_state.pop("download_path", None)
