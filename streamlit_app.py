"""
Streamlit UI for ObitFinder.

Run with:
    streamlit run streamlit_app.py
"""

import json

import streamlit as st

from obit_finder.config import SearchSettings
from obit_finder.main import search_obits
from obit_finder.tools.exclusions import ExclusionStore
from obit_finder.tools.normalize import InvalidQueryError

# ---------------------------------------------------------------------------
# Page configuration
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="ObitFinder",
    page_icon="🕯️",
    layout="centered",
)


@st.cache_resource
def get_settings() -> SearchSettings:
    return SearchSettings.from_env()


@st.cache_resource
def get_exclusion_store() -> ExclusionStore:
    return ExclusionStore(get_settings().exclusion_db_path)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------
st.title("🕯️ ObitFinder")
st.markdown(
    "Enter what you know about a person to find **obituaries** that match. "
    "Hits from several search engines are merged, and every result shows "
    "why it was ranked where it is."
)

st.divider()

# ---------------------------------------------------------------------------
# Input form
# ---------------------------------------------------------------------------
with st.form("obit_search_form"):
    col1, col2 = st.columns(2)
    with col1:
        first_name = st.text_input("First Name", placeholder="e.g. William")
        nickname = st.text_input(
            "Nickname",
            placeholder="e.g. Bill",
            help="Searched together with the first name (Bill OR William).",
        )
        city = st.text_input("City", placeholder="e.g. Columbus")
        age = st.number_input("Approximate Age", min_value=0, max_value=130, value=0, step=1)
    with col2:
        last_name = st.text_input("Last Name", placeholder="e.g. Smith")
        middle_name = st.text_input("Middle Name", placeholder="optional")
        state = st.text_input("State", placeholder="e.g. OH or Ohio")
        keywords = st.text_input("Keywords", placeholder="e.g. veteran, nurse")

    submitted = st.form_submit_button("🔎 Search", use_container_width=True)

# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------
if submitted:
    query = {
        "first_name": first_name,
        "last_name": last_name,
        "nickname": nickname,
        "middle_name": middle_name,
        "city": city,
        "state": state,
        "keywords": keywords,
    }
    if age:
        query["age"] = int(age)

    with st.spinner("Searching obituaries across providers…"):
        try:
            st.session_state["response"] = search_obits(
                query,
                exclusion_store=get_exclusion_store(),
                settings=get_settings(),
            )
        except InvalidQueryError as exc:
            st.error(f"Please check the form: {exc}")
            st.session_state.pop("response", None)

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
response = st.session_state.get("response")
if response is not None:
    st.divider()

    if response.get("error"):
        st.warning(response["error"])
    elif not response["results"]:
        st.info("No matching obituaries found.")

    for result in response["results"]:
        location = ", ".join(p for p in (result.get("city"), result.get("state")) if p)
        with st.container(border=True):
            st.subheader(f"#{result['rank']} {result.get('full_name') or 'Unknown'}")
            col_a, col_b, col_c = st.columns(3)
            col_a.metric("Score", result["final_score"])
            col_b.metric("Age", result.get("age_years") or "—")
            col_c.metric("Died", result.get("dod") or "—")
            if location:
                st.caption(location)
            st.markdown(f"**{result.get('source', '')}:** [{result['url']}]({result['url']})")
            for url in result.get("also_found_at", []):
                st.markdown(f"Also found at: [{url}]({url})")

            with st.expander("Why this rank?"):
                for reason in result.get("reasons", []):
                    st.write(f"• {reason}")

            if st.button("Not this person", key=f"exclude-{result['id']}"):
                _, is_new = get_exclusion_store().add(
                    search_key=response["search_key"],
                    excluded_fingerprint=result.get("fingerprint"),
                    excluded_url=result.get("url"),
                    excluded_name=result.get("full_name"),
                    reason="wrong person",
                )
                response["results"] = [r for r in response["results"] if r["id"] != result["id"]]
                st.toast("Excluded from this search" if is_new else "Already excluded")
                st.rerun()

    with st.expander("📋 Raw JSON Output"):
        st.code(json.dumps(response, indent=2), language="json")

# ---------------------------------------------------------------------------
# Footer
# ---------------------------------------------------------------------------
st.divider()
st.caption(
    "ObitFinder • Powered by LangGraph • "
    "SerpAPI + Serper + Google CSE + DuckDuckGo fan-out"
)
