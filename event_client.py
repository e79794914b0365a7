"""Manual smoke test for the createEvent callable.

Usage:
  python event_client.py --event-name "Launch Party" --company-id co123 --dry-run
  python event_client.py --event-name "Launch Party" --company-id co123

Set FIREBASE_ID_TOKEN (or write credentials/id_token.txt) and FIREBASE_PROJECT_ID,
or FUNCTIONS_BASE_URL / FUNCTIONS_EMULATOR_HOST to target another endpoint.
"""
import argparse
import asyncio
import json

from callables.client import functions_base_url
from frontend.composer import FieldValidationError, compose_request, load_reference_ids
from frontend.controller import CreateEventController
from frontend.presenter import present, reference_summary


def dry_run(event_name, company_id, refs):
    try:
        request = compose_request(
            event_name,
            company_id,
            table_layouts=refs["tableLayouts"],
            categories=refs["categories"],
            club_card_ids=refs["clubCardIds"],
            event_genre=refs["eventGenre"],
        )
    except FieldValidationError as e:
        print(f"Validation failed: {e.errors}")
        return 2
    print(f"POST {functions_base_url()}/createEvent")
    print(json.dumps({"data": request.to_payload()}, indent=2))
    return 0


def run(event_name, company_id, refs):
    controller = CreateEventController(reference_ids=refs)
    state = asyncio.run(controller.submit(event_name, company_id))
    if state.field_errors:
        print(f"Validation failed: {state.field_errors}")
        return 2

    banner = present(state)
    print(banner.text)
    if banner.is_error:
        return 1
    for title, labels in reference_summary(state.outcome.data).items():
        print(f"{title}: {labels}")
    return 0


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--event-name", required=True)
    parser.add_argument("--company-id", required=True)
    parser.add_argument("--refs", help="JSON file with tableLayouts/categories/clubCardIds/eventGenre ids")
    parser.add_argument("--no-refs", action="store_true", help="Send all reference lists empty")
    parser.add_argument("--dry-run", action="store_true", help="Print the request without sending it")
    args = parser.parse_args()

    if args.no_refs:
        refs = {"tableLayouts": [], "categories": [], "clubCardIds": [], "eventGenre": []}
    else:
        refs = load_reference_ids(args.refs)

    if args.dry_run:
        return dry_run(args.event_name, args.company_id, refs)
    return run(args.event_name, args.company_id, refs)


if __name__ == '__main__':
    raise SystemExit(main())
