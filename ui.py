import html

import streamlit as st

def setup_style():
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Fraunces:wght@600;800&family=Nunito+Sans:wght@400;600;700&display=swap');

        :root {
            --cream: #fff8f0;
            --cream-strong: #fbeee0;
            --frosting: #f7c8d4;
            --cocoa: #4a2c2a;
            --cocoa-soft: rgba(74, 44, 42, 0.68);
            --accent: #d96c8a;
            --card-shadow: 0 10px 30px rgba(74, 44, 42, 0.12);
            --ease-fluid: cubic-bezier(0.22, 1, 0.36, 1);
            --anim-mid: 320ms;
        }

        html, body, .stApp {
            font-family: 'Nunito Sans', sans-serif;
            color: var(--cocoa);
            background:
                radial-gradient(40rem 20rem at 8% -5%, rgba(247, 200, 212, 0.45), transparent 65%),
                radial-gradient(36rem 18rem at 95% 0%, rgba(255, 222, 173, 0.40), transparent 62%),
                var(--cream);
        }

        .main .block-container {
            padding-top: 1.4rem;
            padding-bottom: 2rem;
            animation: pageFadeIn var(--anim-mid) var(--ease-fluid);
        }

        @keyframes pageFadeIn {
            from { opacity: 0; transform: translateY(8px); }
            to { opacity: 1; transform: translateY(0); }
        }

        h1, h2, h3 {
            font-family: 'Fraunces', serif;
            font-weight: 800;
            letter-spacing: -0.02em;
            color: var(--cocoa);
        }

        [data-testid="stSidebar"] {
            background: var(--cream-strong) !important;
            border-right: 1px solid rgba(74, 44, 42, 0.08) !important;
        }

        .stButton > button {
            border-radius: 999px;
            border: 1px solid rgba(217, 108, 138, 0.45);
            transition: transform 160ms var(--ease-fluid), box-shadow 160ms var(--ease-fluid);
        }

        .stButton > button:hover {
            transform: translateY(-1px);
            box-shadow: 0 6px 18px rgba(217, 108, 138, 0.25);
        }

        .cs-card {
            background: #ffffff;
            border-radius: 18px;
            padding: 1.1rem 1.3rem;
            box-shadow: var(--card-shadow);
            margin-bottom: 1rem;
        }

        .cs-card-title {
            font-family: 'Fraunces', serif;
            font-size: 1.15rem;
            font-weight: 700;
        }

        .cs-card-sub {
            color: var(--cocoa-soft);
            font-size: 0.92rem;
        }

        .cs-role-badge {
            display: inline-block;
            margin-top: 0.5rem;
            padding: 0.15rem 0.7rem;
            border-radius: 999px;
            background: var(--frosting);
            font-size: 0.8rem;
            font-weight: 700;
            text-transform: uppercase;
            letter-spacing: 0.05em;
        }

        .cs-loading-overlay {
            position: fixed;
            inset: 0;
            display: flex;
            align-items: center;
            justify-content: center;
            background: rgba(255, 248, 240, 0.85);
            backdrop-filter: blur(6px);
            z-index: 9999;
        }

        .cs-loading-card {
            text-align: center;
            padding: 1.6rem 2.2rem;
            border-radius: 22px;
            background: #ffffff;
            box-shadow: var(--card-shadow);
        }

        .cs-loading-whisk {
            width: 46px;
            height: 46px;
            margin: 0 auto 0.8rem auto;
            border-radius: 50%;
            border: 4px solid var(--frosting);
            border-top-color: var(--accent);
            animation: whisk 0.9s linear infinite;
        }

        @keyframes whisk {
            to { transform: rotate(360deg); }
        }

        .cs-loading-title {
            font-family: 'Fraunces', serif;
            font-weight: 700;
        }

        .cs-loading-sub {
            color: var(--cocoa-soft);
            font-size: 0.9rem;
        }

        .cs-footer {
            margin-top: 3rem;
            padding-top: 1rem;
            border-top: 1px solid rgba(74, 44, 42, 0.1);
            color: var(--cocoa-soft);
            font-size: 0.82rem;
            text-align: center;
        }

        @media (prefers-reduced-motion: reduce) {
            .main .block-container, .cs-loading-whisk {
                animation: none !important;
            }
        }
    </style>
    """, unsafe_allow_html=True)

def show_loading_overlay(message="Just a moment"):
    st.markdown(
        f"""
        <div class="cs-loading-overlay">
          <div class="cs-loading-card">
            <div class="cs-loading-whisk"></div>
            <div class="cs-loading-title">Whisking things up</div>
            <div class="cs-loading-sub">{html.escape(message)}</div>
          </div>
        </div>
        """,
        unsafe_allow_html=True
    )

def render_profile_card(identity, role, email_verified):
    name = identity.display_name or identity.email or identity.uid
    verified = "Email verified" if email_verified else "Email not verified"
    role_label = role.value if role is not None else "no role"
    st.markdown(
        f"""
        <div class="cs-card">
          <div class="cs-card-title">{html.escape(name)}</div>
          <div class="cs-card-sub">{html.escape(identity.email or "")} · {verified}</div>
          <span class="cs-role-badge">{html.escape(role_label)}</span>
        </div>
        """,
        unsafe_allow_html=True
    )

def render_footer():
    st.markdown(
        '<div class="cs-footer">Baked fresh to order · Prices and availability are confirmed by your baker.</div>',
        unsafe_allow_html=True
    )
