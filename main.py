import streamlit as st
from dotenv import load_dotenv

from explorer.logging_config import setup_logging
from explorer.settings import settings

load_dotenv()
setup_logging()

st.set_page_config(page_title="Secure File Explorer", page_icon="🗂️", layout="wide")

st.title("🗂️ Secure File Explorer")

st.markdown(
    """
Browse, download and upload files inside a confined storage root.

- Go to **Browse** to navigate folders and download files
- Go to **Upload** to send a file to the upload area

### Protections

- ✅ **Confinement**: every path is resolved by the OS and must stay under the root
- ✅ **Sanitization**: dangerous characters and `..` are stripped from client input
- ✅ **Extension allow-list**: only listed file types are shown, served or stored
- ✅ **No overwrite**: uploads get a `_1`, `_2`… suffix and are written exclusively
- ✅ **Audit trail**: rejections are logged as digests, never as raw input
"""
)

with st.expander("⚙️ Configuration", expanded=False):
    st.caption(f"Allowed types: {', '.join(sorted(settings.allowed_extensions))}")
    st.caption(f"Max upload: {settings.max_upload_mb} MB")
    st.caption(f"Max path length: {settings.max_name_length}")
