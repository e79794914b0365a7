import asyncio

import streamlit as st

from callables.client import functions_base_url
from frontend.composer import REFERENCE_FIELDS, ReferenceIdsError, parse_id_list
from frontend.controller import CreateEventController, SubmissionInFlight
from frontend.presenter import present, reference_summary

FIELD_LABELS = {
    "tableLayouts": "Table Layout IDs",
    "categories": "Category IDs",
    "clubCardIds": "Club Card IDs",
    "eventGenre": "Event Genre IDs",
}

st.set_page_config(page_title="Create Event Test", layout="centered")
st.title("Create Event Test")

if "controller" not in st.session_state:
    try:
        st.session_state.controller = CreateEventController()
    except ReferenceIdsError as e:
        st.error(str(e))
        st.stop()

controller: CreateEventController = st.session_state.controller

with st.sidebar:
    st.header("Connection")
    st.write(f"Functions endpoint: {functions_base_url()}")
    st.caption("Bearer token is read from FIREBASE_ID_TOKEN or credentials/id_token.txt")

    st.header("Reference IDs")
    st.caption("Document IDs from the company's collections, one per line.")
    for field in REFERENCE_FIELDS:
        text = st.text_area(
            FIELD_LABELS[field],
            value="\n".join(controller.reference_ids.get(field, [])),
            key=f"refs_{field}",
        )
        controller.reference_ids[field] = parse_id_list(text)

errors = controller.state.field_errors

event_name = st.text_input("Event Name", key="event_name")
if errors.get("eventName"):
    st.caption(f":red[{errors['eventName']}]")

company_id = st.text_input("Company ID", key="company_id")
if errors.get("companyId"):
    st.caption(f":red[{errors['companyId']}]")

if st.button("Create Event", type="primary", disabled=controller.in_flight):
    with st.spinner("Creating event..."):
        try:
            asyncio.run(controller.submit(event_name, company_id))
        except SubmissionInFlight as e:
            st.warning(str(e))
    st.rerun()

banner = present(controller.state)
if banner is not None:
    if banner.is_error:
        st.error(banner.text)
        details = getattr(controller.state.outcome, "details", None)
        if details:
            with st.expander("Error details"):
                st.json(details)
    else:
        st.success(banner.text)
        summary = reference_summary(controller.state.outcome.data)
        with st.expander("Function result"):
            for title, labels in summary.items():
                st.write(f"{title}: {', '.join(labels) if labels else '(none)'}")
            st.json(controller.state.outcome.result)
