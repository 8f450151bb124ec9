"""Streamlit UI for PDF chat.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from ui import helpers  # noqa: E402

# Configuration
BACKEND_URL = "http://localhost:8000"

# Page config
st.set_page_config(page_title="PDF Chat", page_icon="📄", layout="wide")

# Initialize session state
if "selected_session" not in st.session_state:
    st.session_state.selected_session = None
if "notice" not in st.session_state:
    st.session_state.notice = None

st.title("📄 Chat with your PDFs")

# =============================================================================
# SIDEBAR - UPLOAD + SESSIONS
# =============================================================================
try:
    sessions = helpers.list_sessions(BACKEND_URL)
except httpx.HTTPError as e:
    sessions = []
    st.sidebar.error(f"Could not load chat sessions: {e}")

with st.sidebar:
    st.subheader("Upload")
    uploaded = st.file_uploader("PDF files", type=["pdf"], accept_multiple_files=True)

    if st.button("Upload", disabled=not uploaded):
        names = [f.name for f in uploaded]
        already = helpers.find_already_uploaded(sessions, names)
        if already:
            st.warning(f'File "{already[0]}" already uploaded. Please open its chat.')
        else:
            try:
                payload = [(f.name, f.getvalue()) for f in uploaded]
                result = helpers.upload_pdfs(BACKEND_URL, payload)
                if result.get("session_id"):
                    st.session_state.selected_session = result["session_id"]
                st.session_state.notice = "PDF(s) uploaded successfully!"
                st.rerun()
            except httpx.HTTPStatusError as e:
                st.error(helpers.error_message(e, "Error uploading PDF(s)."))

    active, archived = helpers.split_sessions(sessions)

    st.subheader("Chats")
    for s in active:
        if st.button(helpers.session_label(s), key=f"open-{s['session_id']}"):
            st.session_state.selected_session = s["session_id"]

    if archived:
        with st.expander(f"Archived ({len(archived)})"):
            for s in archived:
                if st.button(helpers.session_label(s), key=f"open-{s['session_id']}"):
                    st.session_state.selected_session = s["session_id"]

if st.session_state.notice:
    st.success(st.session_state.notice)
    st.session_state.notice = None

# =============================================================================
# MAIN - CHAT
# =============================================================================
session_id = st.session_state.selected_session
current = next((s for s in sessions if s["session_id"] == session_id), None)

if current is None:
    st.info("Upload PDFs or pick a chat from the sidebar.")
    st.stop()

st.caption(", ".join(current["document_names"]))

col_archive, col_export, col_delete = st.columns(3)
with col_archive:
    label = "Unarchive" if current["archived"] else "Archive"
    if st.button(label):
        helpers.toggle_archive(BACKEND_URL, session_id)
        st.rerun()
with col_export:
    try:
        pdf_bytes = helpers.export_pdf(BACKEND_URL, session_id)
        st.download_button(
            "Export PDF",
            data=pdf_bytes,
            file_name=f"chat_{session_id}.pdf",
            mime="application/pdf",
        )
    except httpx.HTTPStatusError:
        st.button("Export PDF", disabled=True, help="Nothing to export yet")
with col_delete:
    if st.button("Delete", type="secondary"):
        helpers.delete_session(BACKEND_URL, session_id)
        st.session_state.selected_session = None
        st.rerun()

st.divider()

messages = helpers.fetch_history(BACKEND_URL, session_id)
for idx, msg in enumerate(messages):
    with st.chat_message("user"):
        st.markdown(msg["question"])
    with st.chat_message("assistant"):
        st.markdown(msg["answer"])
        col_up, col_down, col_marker = st.columns([1, 1, 8])
        with col_up:
            if st.button("👍", key=f"up-{idx}"):
                helpers.rate(BACKEND_URL, session_id, idx, "up")
                st.rerun()
        with col_down:
            if st.button("👎", key=f"down-{idx}"):
                helpers.rate(BACKEND_URL, session_id, idx, "down")
                st.rerun()
        with col_marker:
            st.write(helpers.rating_icon(msg.get("rating")))

question = st.chat_input("Ask a question about these documents")
if question:
    with st.spinner("Thinking..."):
        try:
            helpers.ask(BACKEND_URL, session_id, question)
        except httpx.HTTPStatusError as e:
            st.error(helpers.error_message(e, "Error getting answer."))
        else:
            st.rerun()
