# run_extraction.py
"""
Extract listings from a saved document or straight from the site.

    python run_extraction.py --file saved_search.html
    python run_extraction.py --file feed.xml --kind atom_xml
    python run_extraction.py --org-id 4008599 --source api
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Make the repo root importable when run from elsewhere
repo_root = Path(__file__).resolve().parent
if str(repo_root) not in sys.path:
    sys.path.append(str(repo_root))

from core.config import settings
from core.exceptions import ListingException
from core.logging import setup_logging
from models.listing import DocumentKind, RawDocument
from models.listing_request import ListingRequest, SourceMode
from services.extractors.orchestrator import run_extraction
from services.fetch.gateway import FetchGateway, HttpxFetcher
from services.listings.listing_service import ListingService
from services.sources.config_loader import get_source_profile, list_available_sources


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--source-name", default=settings.SOURCE_NAME, choices=list_available_sources())
    parser.add_argument("--file", type=Path, help="local document to extract from")
    parser.add_argument("--kind", default=DocumentKind.HTML.value, choices=[k.value for k in DocumentKind])
    parser.add_argument("--org-id", default=None)
    parser.add_argument("--source", default=SourceMode.AUTO.value, choices=[m.value for m in SourceMode])
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = _parse_args(argv)
    setup_logging(settings.LOG_LEVEL)
    profile = get_source_profile(args.source_name)

    if args.file:
        doc = RawDocument(
            kind=DocumentKind(args.kind),
            body=args.file.read_text(encoding="utf-8"),
            source_url=str(args.file),
        )
        envelope = run_extraction(doc, profile).to_envelope(source="file")
    else:
        fetcher = HttpxFetcher(timeout=settings.TIMEOUT, max_attempts=settings.FETCH_RETRIES)
        gateway = FetchGateway(
            fetcher,
            profile,
            api_key=settings.FINN_API_KEY,
            user_agent=settings.DEFAULT_USER_AGENT,
            accept_language=settings.ACCEPT_LANGUAGE,
        )
        service = ListingService(gateway, profile, default_org_id=settings.DEFAULT_ORG_ID)
        try:
            envelope = await service.get_listings(
                ListingRequest(org_id=args.org_id, source=SourceMode(args.source))
            )
        except ListingException as exc:
            envelope = exc.to_dict()
        finally:
            await fetcher.aclose()

    print(json.dumps(envelope, indent=2, ensure_ascii=False))
    return 0 if envelope.get("ok") else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
