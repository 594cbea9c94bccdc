"""Streamlit page: paste postcodes, enrich, preview and download the CSV.

Run with ``streamlit run postcode_enricher/ui/streamlit_app.py``.
"""

from __future__ import annotations

from pathlib import Path

import streamlit as st

from postcode_enricher.app.container import Container, build_container
from postcode_enricher.app.controller import Phase
from postcode_enricher.common.config_loader import load_config
from postcode_enricher.common.logging import build_logger

CONFIG_DIR = Path("config")


def _container() -> Container:
    if "container" not in st.session_state:
        config = load_config(CONFIG_DIR)
        st.session_state["container"] = build_container(config, logger=build_logger("streamlit"))
    return st.session_state["container"]


def main() -> None:
    st.set_page_config(page_title="UK Postcode Enricher", layout="wide")
    st.title("UK Postcode Enricher")

    container = _container()
    controller = container.controller
    status = st.empty()
    controller.listener = status.text

    raw = st.text_area("Postcodes (one per line or comma separated)", height=200)
    if st.button("Enrich", disabled=not controller.state.run_enabled):
        controller.run(raw)

    status.text(controller.state.status)

    payload = controller.download_payload()
    st.download_button(
        "Download CSV",
        data=payload[1] if payload else b"",
        file_name=payload[0] if payload else "postcodes_enriched.csv",
        mime="text/csv",
        disabled=payload is None,
    )

    view = controller.state.table
    if controller.state.phase is Phase.DONE and view is not None:
        st.dataframe([dict(zip(view.header, row)) for row in view.rows])
        if view.truncated:
            st.caption(f"Showing {len(view.rows)} of {view.total_rows} rows")


if __name__ == "__main__":
    main()
