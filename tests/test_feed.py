# tests/test_feed.py
from services.extractors.feed import FeedStrategy

ATOM = """<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:media="http://search.yahoo.com/mrss/"
      xmlns:f="urn:finn:ad">
  <title>Søkeresultat</title>
  <entry>
    <title>Volvo V60 T6 Recharge</title>
    <link rel="self" href="https://cache.api.finn.no/iad/ad/111"/>
    <link rel="alternate" href="https://www.finn.no/car/used/ad.html?finnkode=111"/>
    <media:content url="https://images.finncdn.no/dynamic/111.jpg"/>
    <f:price name="extra"><f:value>9900</f:value></f:price>
    <f:price name="main" currency="NOK"><f:value>459000</f:value></f:price>
  </entry>
  <entry>
    <title>Tesla Model 3</title>
    <link href="/car/used/ad.html?finnkode=222"/>
    <link rel="enclosure" href="//images.finncdn.no/dynamic/222.jpg"/>
    <summary type="html">&lt;p&gt;2020, 45 000 km. Pris: 189 000 kr&lt;/p&gt;</summary>
  </entry>
  <entry>
    <summary>No title, no link</summary>
  </entry>
</feed>
"""


def test_entries_are_mapped(profile, atom_doc):
    items = FeedStrategy(profile).extract(atom_doc(ATOM))

    assert len(items) == 2
    first, second = items

    assert first.title == "Volvo V60 T6 Recharge"
    assert first.link == "https://www.finn.no/car/used/ad.html?finnkode=111"
    assert first.image == "https://images.finncdn.no/dynamic/111.jpg"
    assert first.price == "459 000 kr"

    # missing rel counts as alternate, price recovered from the summary text
    assert second.link == "https://www.finn.no/car/used/ad.html?finnkode=222"
    assert second.image == "https://images.finncdn.no/dynamic/222.jpg"
    assert second.price == "189 000 kr"


def test_non_xml_body_is_contained(profile, atom_doc):
    assert FeedStrategy(profile).extract(atom_doc('{"docs": []}')) == []


def test_xml_without_feed_root(profile, atom_doc):
    assert FeedStrategy(profile).extract(atom_doc("<rss><channel/></rss>")) == []


def test_empty_feed(profile, atom_doc):
    assert FeedStrategy(profile).extract(atom_doc('<feed xmlns="http://www.w3.org/2005/Atom"/>')) == []


def test_first_link_used_when_none_is_alternate(profile, atom_doc):
    body = """<feed xmlns="http://www.w3.org/2005/Atom">
      <entry>
        <title>Polestar 2</title>
        <link rel="self" href="https://cache.api.finn.no/iad/ad/333"/>
        <link rel="enclosure" href="https://images.finncdn.no/dynamic/333.jpg"/>
      </entry>
    </feed>"""
    items = FeedStrategy(profile).extract(atom_doc(body))

    assert len(items) == 1
    assert items[0].link == "https://cache.api.finn.no/iad/ad/333"
    assert items[0].image == "https://images.finncdn.no/dynamic/333.jpg"
