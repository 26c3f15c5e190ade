"""
Upload page - send one file into the upload area.

SECURITY:
- Filename and target folder are client input, handled by explorer.uploads
- Size is checked before writing and again while the stream is written
- Existing files are never overwritten (suffix + exclusive create)
- Audit logging for every stored or refused upload
"""

import logging
import uuid

import streamlit as st
from dotenv import load_dotenv

from explorer.audit_log import (
    RequestTimer,
    generate_request_id,
    log_rejection,
    log_upload,
)
from explorer.errors import Rejected, Reason
from explorer.logging_config import setup_logging
from explorer.policy import PolicyConfig, build_policy
from explorer.presentation import format_file_size
from explorer.rate_limit import check_rate_limit, rules_from_settings
from explorer.settings import settings
from explorer.uploads import iter_chunks, save_upload

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)


@st.cache_resource
def get_policy() -> PolicyConfig:
    """Process-wide policy, built once."""
    return build_policy(settings)


policy = get_policy()
rules = rules_from_settings(settings)

if "session_id" not in st.session_state:
    st.session_state["session_id"] = uuid.uuid4().hex[:16]
session_id = st.session_state["session_id"]

st.title("📤 Upload")

if "upload_success_msg" in st.session_state:
    st.success(st.session_state.pop("upload_success_msg"))

with st.expander("⚙️ Limits", expanded=False):
    st.caption(f"Max size: {format_file_size(policy.max_upload_bytes)}")
    st.caption(f"Allowed types: {', '.join(sorted(policy.extensions.allowed))}")

target_dir = st.text_input("Target folder (optional)", placeholder="e.g. reports/2024")

upload_key = st.session_state.get("upload_key", "uploader_0")
uploaded = st.file_uploader(
    "File",
    type=sorted(policy.extensions.allowed),
    key=upload_key,
    accept_multiple_files=False,
)

if uploaded is not None and st.button("Upload", type="primary"):
    request_id = generate_request_id()

    allowed, retry = check_rate_limit(st.session_state, rules["upload"])
    if not allowed:
        st.warning(f"{rules['upload'].message} Retry in {retry}s.")
        st.stop()

    if uploaded.size > policy.max_upload_bytes:
        rejected = Rejected(Reason.FILE_TOO_LARGE, "declared_size")
        log_rejection(request_id, session_id, "upload", uploaded.name, rejected)
        st.error(f"❌ File too large (max {format_file_size(policy.max_upload_bytes)})")
        st.stop()

    with RequestTimer() as timer:
        try:
            uploaded.seek(0)
            result = save_upload(
                settings.upload_dir,
                target_dir,
                uploaded.name,
                iter_chunks(uploaded),
                policy,
            )
        except Exception:
            logger.exception("Upload failed", extra={"error_code": "UPLOAD_ERROR"})
            st.error("❌ Upload failed")
            st.stop()

    if isinstance(result, Rejected):
        log_rejection(request_id, session_id, "upload", uploaded.name, result)
        st.error(f"❌ {result.message}")
    else:
        log_upload(request_id, session_id, uploaded.name, result.size_bytes, timer.elapsed_ms)
        st.session_state["upload_success_msg"] = (
            f"✅ Stored as '{result.relative_path}' ({format_file_size(result.size_bytes)})"
        )
        st.session_state["upload_key"] = f"uploader_{uuid.uuid4().hex[:8]}"
        st.rerun()
