from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

APP_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = APP_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import streamlit as st

from geometa import config
from geometa.hints import (
    Hint,
    HintStore,
    HintStoreError,
    HintValidationError,
    NoHintsAvailable,
    QuizEngine,
    Score,
    coverage,
    create_store,
    format_meta_type,
    group_by_country,
    group_by_meta_type,
    search_hints,
)

config.configure_logging()
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="GeoMeta Hints",
    page_icon=":earth_africa:",
    layout="wide",
)

PAGES = ["Continents", "Country", "Metas", "Search", "Add hint", "Quiz"]
NEW_META_TYPE = "+ New meta type"

COVERAGE_COLOURS = {
    "high": "green",
    "medium": "orange",
    "low": "red",
}


@st.cache_resource(show_spinner=False)
def get_store() -> HintStore:
    return create_store()


def show_store_error(action: str, exc: Exception) -> None:
    logger.error("Failed to %s: %s", action, exc)
    st.error(f"Failed to {action}. Please try again.")


def get_nav_state() -> Dict[str, Optional[str]]:
    if "nav" not in st.session_state:
        st.session_state.nav = {
            "page": PAGES[0],
            "country": None,
            "meta_type": None,
        }
    return st.session_state.nav


def open_country(country: str) -> None:
    nav = get_nav_state()
    nav.update({"page": "Country", "country": country})


def open_meta_type(meta_type: str) -> None:
    nav = get_nav_state()
    nav.update({"page": "Metas", "meta_type": meta_type})


def get_quiz_state() -> Dict[str, object]:
    if "quiz" not in st.session_state:
        st.session_state.quiz = {
            "engine": None,
            "meta_types": [],
            "question": None,
            "score": Score(),
            "selected": None,
            "is_correct": None,
            "empty": False,
        }
    return st.session_state.quiz


def render_hint(hint: Hint) -> None:
    with st.container(border=True):
        st.write(hint.description)
        if hint.image_url:
            st.image(hint.image_url, width=320)
        st.caption(f"Added {hint.created_at}")


def render_sidebar() -> str:
    nav = get_nav_state()
    with st.sidebar:
        st.header("GeoMeta Hints")
        page = st.radio("Go to", PAGES, index=PAGES.index(nav["page"]))
        nav["page"] = page
        st.markdown("---")
        st.caption("Crowd-sourced GeoGuessr metas by continent, country and meta type.")
    return page


def render_continents(store: HintStore) -> None:
    st.title("Browse by continent")
    try:
        continents = store.continents()
        catalog = {continent: store.countries(continent) for continent in continents}
    except HintStoreError as exc:
        show_store_error("load continents and countries", exc)
        return

    if not catalog:
        st.info("No continents or countries found in the database.")
        return

    for continent, countries in catalog.items():
        st.subheader(continent.upper())
        columns = st.columns(4, gap="small")
        for idx, country in enumerate(countries):
            if columns[idx % 4].button(
                country, key=f"country_{continent}_{country}", use_container_width=True
            ):
                open_country(country)
                st.rerun()


def render_country(store: HintStore) -> None:
    nav = get_nav_state()
    try:
        countries = store.countries()
    except HintStoreError as exc:
        show_store_error("load countries", exc)
        return

    if not countries:
        st.info("No countries yet. Add the first hint!")
        return

    current = nav["country"] if nav["country"] in countries else countries[0]
    country = st.selectbox("Country", countries, index=countries.index(current))
    nav["country"] = country
    st.title(country)

    try:
        grouped = group_by_meta_type(store.hints_for_country(country))
    except HintStoreError as exc:
        show_store_error(f"load hints for {country}", exc)
        return

    progress = coverage(sum(len(hints) for hints in grouped.values()))
    colour = COVERAGE_COLOURS[progress.band]
    st.progress(progress.percent / 100.0)
    st.markdown(
        f":{colour}[{progress.hint_count} / {progress.reference_total} hints · "
        f"{progress.percent:.1f}% complete vs Plonkit reference]"
    )

    if not grouped:
        st.info("No hints for this country yet.")
        return

    for meta_type, hints in grouped.items():
        with st.expander(f"{format_meta_type(meta_type)} ({len(hints)})", expanded=True):
            for hint in hints:
                render_hint(hint)
            if st.button(
                f"All {format_meta_type(meta_type)} hints", key=f"meta_link_{meta_type}"
            ):
                open_meta_type(meta_type)
                st.rerun()


def render_metas(store: HintStore) -> None:
    nav = get_nav_state()
    try:
        meta_types = store.meta_types()
    except HintStoreError as exc:
        show_store_error("load meta types", exc)
        return

    if not meta_types:
        st.info("No meta types yet.")
        return

    current = nav["meta_type"] if nav["meta_type"] in meta_types else meta_types[0]
    meta_type = st.selectbox(
        "Meta type",
        meta_types,
        index=meta_types.index(current),
        format_func=format_meta_type,
    )
    nav["meta_type"] = meta_type
    st.title(format_meta_type(meta_type))

    try:
        grouped = group_by_country(store.hints_for_meta_type(meta_type))
    except HintStoreError as exc:
        show_store_error(f"load hints for {meta_type}", exc)
        return

    if not grouped:
        st.info("No hints for this meta type yet.")
        return

    for country, hints in grouped.items():
        st.subheader(f"{country} ({len(hints)})")
        for hint in hints:
            render_hint(hint)


def render_search(store: HintStore) -> None:
    st.title("Search hints")
    query = st.text_input("Search", placeholder="e.g. blue pole, yellow plates, Brazil")
    if not query.strip():
        st.caption("Type one or more words. Hints matching the whole phrase are listed first.")
        return

    try:
        results = search_hints(store, query)
    except HintStoreError as exc:
        show_store_error("search hints", exc)
        return

    if not results:
        st.info(f"No hints match '{query.strip()}'.")
        return

    total = sum(len(hints) for by_country in results.values() for hints in by_country.values())
    st.caption(f"{total} matching hints")
    for meta_type, by_country in results.items():
        st.subheader(format_meta_type(meta_type))
        for country, hints in by_country.items():
            st.markdown(f"**{country}**")
            for hint in hints:
                render_hint(hint)


def render_add(store: HintStore) -> None:
    st.title("Add new hint")
    try:
        countries = store.countries()
        meta_types = store.meta_types()
    except HintStoreError as exc:
        show_store_error("load form options", exc)
        return

    country = st.selectbox("Country", countries, index=None, placeholder="Select a country")
    meta_choice = st.selectbox(
        "Meta type",
        meta_types + [NEW_META_TYPE],
        index=None,
        placeholder="Select a meta type",
        format_func=lambda value: value if value == NEW_META_TYPE else format_meta_type(value),
    )
    meta_type = meta_choice
    if meta_choice == NEW_META_TYPE:
        meta_type = st.text_input("New meta type", placeholder="e.g. bollards")

    with st.form("add_hint", clear_on_submit=True):
        description = st.text_area(
            "Description",
            placeholder=f"At least {config.MIN_DESCRIPTION_LENGTH} characters",
        )
        image_url = st.text_input("Image URL (optional)")
        submitted = st.form_submit_button("Add hint", type="primary")

    if not submitted:
        return

    draft = {
        "country": country or "",
        "meta_type": meta_type or "",
        "description": description,
        "image_url": image_url,
    }
    try:
        created = store.insert_hint(draft)
    except HintValidationError as exc:
        st.error("Please fix the following:\n" + "\n".join(f"- {p}" for p in exc.problems))
        return
    except HintStoreError as exc:
        show_store_error("add hint", exc)
        return

    st.success(f"Hint added for {created.country} ({format_meta_type(created.meta_type)}).")


def load_next_question(quiz_state: Dict[str, object]) -> None:
    engine: QuizEngine = quiz_state["engine"]
    quiz_state.update({"selected": None, "is_correct": None, "empty": False})
    try:
        quiz_state["question"] = engine.next_question(quiz_state["meta_types"])
    except NoHintsAvailable:
        quiz_state["question"] = None
        quiz_state["empty"] = True


def start_quiz(store: HintStore) -> None:
    quiz_state = get_quiz_state()
    engine = QuizEngine(store)
    meta_types = store.meta_types()
    quiz_state.update({"engine": engine, "meta_types": meta_types})
    try:
        score, question = engine.reset(meta_types)
    except NoHintsAvailable:
        quiz_state.update({"question": None, "score": Score(), "empty": True})
        return
    quiz_state.update(
        {
            "question": question,
            "score": score,
            "selected": None,
            "is_correct": None,
            "empty": False,
        }
    )


def record_answer(selected: str) -> None:
    quiz_state = get_quiz_state()
    if quiz_state["selected"] is not None:
        return

    is_correct, score = QuizEngine.evaluate(quiz_state["question"], selected, quiz_state["score"])
    quiz_state.update({"selected": selected, "is_correct": is_correct, "score": score})


def render_quiz(store: HintStore) -> None:
    quiz_state = get_quiz_state()
    if quiz_state["engine"] is None:
        try:
            start_quiz(store)
        except HintStoreError as exc:
            show_store_error("load quiz", exc)
            return

    score: Score = quiz_state["score"]
    header, controls = st.columns([3, 1])
    header.title("Quiz mode")
    controls.metric("Score", f"{score.correct}/{score.total}")
    if controls.button("Reset", use_container_width=True):
        try:
            start_quiz(store)
        except HintStoreError as exc:
            show_store_error("reset quiz", exc)
            return
        st.rerun()

    if quiz_state["empty"]:
        st.info("No hints available for the quiz yet.")
        return

    question = quiz_state["question"]
    st.markdown("#### What meta type does this hint describe?")
    with st.container(border=True):
        st.write(question.hint.description)
        if question.hint.image_url:
            st.image(question.hint.image_url, width=320)

    columns = st.columns(2, gap="medium")
    answered = quiz_state["selected"] is not None
    for idx, option in enumerate(question.options):
        if columns[idx % 2].button(
            format_meta_type(option),
            key=f"quiz_option_{score.total}_{idx}",
            use_container_width=True,
            disabled=answered,
        ):
            record_answer(option)
            st.rerun()

    if not answered:
        return

    if quiz_state["is_correct"]:
        st.success("Correct!")
    else:
        st.error(f"Incorrect. The answer was {format_meta_type(question.correct_option)}.")
    st.caption(f"{question.hint.country} · {question.hint.continent}")

    if st.button("Next question", type="primary"):
        try:
            load_next_question(quiz_state)
        except HintStoreError as exc:
            show_store_error("load next question", exc)
            return
        st.rerun()


RENDERERS = {
    "Continents": render_continents,
    "Country": render_country,
    "Metas": render_metas,
    "Search": render_search,
    "Add hint": render_add,
    "Quiz": render_quiz,
}


def main() -> None:
    page = render_sidebar()

    settings = config.get_settings()
    if not settings.has_credentials:
        st.warning("Set `SUPABASE_URL` and `SUPABASE_KEY` to connect to the hint store.")
        st.stop()

    RENDERERS[page](get_store())


if __name__ == "__main__":
    main()
