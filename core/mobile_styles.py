"""Mobile-friendly CSS styles for the app."""
import streamlit as st


def apply_mobile_styles():
    """Apply mobile-responsive CSS styles."""
    st.markdown("""
    <style>
    /* Leave room for the footer tab bar */
    .block-container {
        padding-bottom: 6rem !important;
        max-width: 48rem;
    }

    /* Footer tab bar pinned to the bottom of the viewport */
    div[data-testid="stVerticalBlock"] div:has(> div.footer-nav-marker) + div {
        position: fixed;
        bottom: 0;
        left: 0;
        right: 0;
        z-index: 999;
        background: var(--background-color, #ffffff);
        border-top: 1px solid rgba(0, 0, 0, 0.1);
        padding: 0.5rem 1rem;
    }

    /* Mobile-friendly adjustments */
    @media (max-width: 768px) {
        /* Larger touch targets for buttons */
        .stButton button {
            min-height: 48px !important;
            font-size: 16px !important;
            padding: 12px 24px !important;
        }

        .block-container {
            padding-left: 1rem !important;
            padding-right: 1rem !important;
        }

        /* Form inputs - prevent zoom on iOS */
        input, select, textarea {
            font-size: 16px !important;
        }

        .dataframe {
            overflow-x: auto !important;
            display: block !important;
        }
    }

    .dataframe {
        width: 100% !important;
    }
    </style>
    """, unsafe_allow_html=True)
