from __future__ import annotations
from datetime import datetime

import streamlit as st

from publi_core.bootstrap import AppServices, build_services
from publi_core.data.sales_import import apply_sales_import, parse_sales_report
from publi_core.logging import setup_logging
from publi_core.offline import BRAND_LOGO_KEY, DataSource
from publi_core.state.session import (
    attach_image,
    clear_session,
    init_state,
    load_image,
    refresh_data,
    reset_branding,
    sync_local_changes,
)

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="PubliManager",
    page_icon="📚",
    layout="wide",
)


@st.cache_resource
def get_services() -> AppServices:
    services = build_services()
    setup_logging(services.config.log_level)
    return services


services = get_services()
init_state(services)

doc = st.session_state["app_data"]
source = st.session_state["data_source"]

# ============================================================================
# SIDEBAR - BRANDING & CONNECTIVITY
# ============================================================================
with st.sidebar:
    logo = load_image(services.media, BRAND_LOGO_KEY)
    if logo:
        st.image(logo, width=160)
    st.markdown("### PubliManager")

    if source == DataSource.SERVER.value:
        st.success("Connected to server")
    elif source == DataSource.EMPTY_SERVER.value:
        st.info("Connected: the server has no data yet")
    else:
        st.warning("Disconnected: working on the local copy")
        if st.session_state["source_error"]:
            st.caption(st.session_state["source_error"])

    if st.button("🔄 Reconnect", use_container_width=True):
        clear_session()
        st.rerun()

# ============================================================================
# UPLOAD PROMPT (empty server + meaningful local data)
# ============================================================================
if source == DataSource.EMPTY_SERVER.value and st.session_state["has_local_data"]:
    st.info(
        "The server is empty but this device holds your catalogue. "
        "Upload it so other devices can use it."
    )
    if st.button("⬆️ Upload local data to server", type="primary"):
        if services.resolver.force_push_to_server():
            st.success("Local data uploaded")
            refresh_data(services)
            st.rerun()
        else:
            st.error("Upload failed. The server could not be reached.")

# ============================================================================
# OVERVIEW
# ============================================================================
st.title("📚 PubliManager")

cols = st.columns(4)
cols[0].metric("Books", len(doc.books))
cols[1].metric("Pseudonyms", len(doc.pseudonyms))
cols[2].metric("Open tasks", sum(1 for t in doc.tasks if not t.completed))
cols[3].metric("Royalties", f"{sum(s.revenue for s in doc.sales):,.2f}")

dangling = doc.dangling_references()
if dangling:
    st.caption(f"{len(dangling)} references point to deleted entries and show as unknown.")

tab_backup, tab_royalties, tab_branding = st.tabs(["Backup", "Royalty import", "Branding"])

# ============================================================================
# BACKUP
# ============================================================================
with tab_backup:
    st.download_button(
        "💾 Download backup",
        data=services.store.export_data(),
        file_name=f"publimanager_backup_{datetime.now():%Y%m%d}.json",
        mime="application/json",
    )

    uploaded = st.file_uploader("Restore from backup", type=["json"])
    if uploaded is not None and st.button("Restore"):
        if services.store.import_data(uploaded.getvalue()) and sync_local_changes(services):
            st.success("Backup restored")
            st.rerun()

    if st.button("⬆️ Push local data to server"):
        if services.resolver.force_push_to_server():
            st.success("Server replaced with the local copy")
            refresh_data(services)
            st.rerun()
        else:
            st.error("Push failed")

# ============================================================================
# ROYALTY IMPORT
# ============================================================================
with tab_royalties:
    st.caption("Paste rows: Title, Month, Year, Units, KENP, Royalties, Currency, ASIN")
    raw = st.text_area("Royalty report", height=200)
    rows = parse_sales_report(raw) if raw.strip() else None

    if rows is not None and not rows.empty:
        st.dataframe(rows, use_container_width=True)
        if st.button("Import sales", type="primary"):
            summary = apply_sales_import(services.store.get_data(), rows)
            if services.store.save_data(summary.data) and sync_local_changes(services):
                st.success(
                    f"{summary.sales_added} sales imported, {summary.books_created} books "
                    f"created, {summary.duplicates_skipped} duplicates skipped"
                )

# ============================================================================
# BRANDING
# ============================================================================
with tab_branding:
    logo_file = st.file_uploader("Brand logo", type=["png", "jpg", "jpeg", "svg", "webp"])
    if logo_file is not None and st.button("Save logo"):
        if attach_image(services.media, BRAND_LOGO_KEY, logo_file.getvalue(), logo_file.type):
            st.rerun()

    if st.button("Restore default branding"):
        if reset_branding(services.media):
            st.rerun()
