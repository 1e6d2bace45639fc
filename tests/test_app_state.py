# tests/test_app_state.py
import json

from services.extractors.app_state import AppStateStrategy, iter_listing_nodes, looks_like_listing


def _page(state) -> str:
    raw = state if isinstance(state, str) else json.dumps(state)
    return (
        "<html><head><title>Biler</title></head><body>"
        f'<script id="__NEXT_DATA__" type="application/json">{raw}</script>'
        "</body></html>"
    )


STATE = {
    "props": {
        "pageProps": {
            "search": {
                "docs": [
                    {
                        "heading": "Audi A4 Avant",
                        "ad_id": 333,
                        "image": {"url": "https://images.finncdn.no/dynamic/333.jpg"},
                        "price": {"amount": 199000, "currency_code": "NOK"},
                        "seller": {"name": "Bilhuset AS", "image": "https://images.finncdn.no/logo.png"},
                    },
                    {"heading": "Listing without photo", "ad_id": 444},
                ],
                "metadata": {"title": "Bruktbil", "result_size": 2},
            }
        }
    }
}


def test_listing_like_objects_are_mapped(profile, html_doc):
    items = AppStateStrategy(profile).extract(html_doc(_page(STATE)))

    assert len(items) == 1
    item = items[0]
    assert item.title == "Audi A4 Avant"
    assert item.link == "https://www.finn.no/car/used/ad.html?finnkode=333"
    assert item.image == "https://images.finncdn.no/dynamic/333.jpg"
    assert item.price == "199 000 kr"


def test_seller_of_a_listing_is_not_reported():
    nodes = list(iter_listing_nodes(STATE))

    assert [n["heading"] for n in nodes] == ["Audi A4 Avant"]


def test_listings_below_a_qualifying_page_object_are_found(profile, html_doc):
    state = {
        "props": {
            "pageProps": {
                "title": "Bruktbil",
                "image": "https://www.finn.no/og.jpg",
                "docs": [
                    {"heading": "Audi Q4", "ad_id": 1, "image": "https://images.finncdn.no/1.jpg"},
                    {"heading": "Volvo EX30", "ad_id": 2, "image": "https://images.finncdn.no/2.jpg"},
                ],
            }
        }
    }
    items = AppStateStrategy(profile).extract(html_doc(_page(state)))

    titles = [i.title for i in items]
    assert {"Audi Q4", "Volvo EX30"} <= set(titles)
    assert titles.index("Audi Q4") < titles.index("Volvo EX30")
    links = {i.title: i.link for i in items}
    assert links["Volvo EX30"] == "https://www.finn.no/car/used/ad.html?finnkode=2"


def test_looks_like_listing_needs_title_and_image():
    assert looks_like_listing({"name": "Kia", "thumbnail": "//img/kia.jpg"})
    assert not looks_like_listing({"name": "Kia"})
    assert not looks_like_listing({"image": "//img/kia.jpg", "title": "   "})
    assert not looks_like_listing(["name", "image"])


def test_no_state_script(profile, html_doc):
    assert AppStateStrategy(profile).extract(html_doc("<html><body><p>Ingen treff</p></body></html>")) == []


def test_invalid_state_json_is_contained(profile, html_doc):
    assert AppStateStrategy(profile).extract(html_doc(_page("{not json"))) == []
