import streamlit as st

STATUS_COLORS = {
    "good": ("#dcfce7", "#15803d"),
    "caution": ("#fef9c3", "#a16207"),
    "critical": ("#fee2e2", "#b91c1c"),
}


def apply_global_styles():
    st.markdown("""
        <style>
        /* Hide the top-right toolbar */
        [data-testid="stToolbar"] {
            display: none !important;
        }
        .board-panel h3 {
            color: #0072ce;
            font-weight: 800;
            letter-spacing: 0.02em;
        }
        .status-pill {
            padding: 2px 8px;
            border-radius: 6px;
            font-size: 12px;
            font-weight: 600;
        }
        </style>
    """, unsafe_allow_html=True)


def status_pill(status: str) -> str:
    bg, fg = STATUS_COLORS.get(status, ("#f1f5f9", "#334155"))
    return f'<span class="status-pill" style="background:{bg};color:{fg};">{status}</span>'
