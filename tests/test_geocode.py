import asyncio

import httpx

from dinebot.geocode import PLACEHOLDER, NominatimGeocoder, format_address


def test_format_address_parts():
    data = {"address": {
        "house_number": "12", "road": "MG Road", "suburb": "Indiranagar",
        "city": "Bengaluru", "state": "Karnataka", "postcode": "560038",
    }}
    assert format_address(data) == "12, MG Road, Indiranagar, Bengaluru, Karnataka, 560038"


def test_format_address_fallbacks():
    assert format_address({}) == PLACEHOLDER
    assert format_address({"address": {"country": "India"}, "display_name": "Somewhere, India"}) == "Somewhere, India"


def _geocode(handler):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await NominatimGeocoder("https://geo.test/reverse", "test-agent", client=client).reverse_geocode(1.5, 2.5)
    return asyncio.run(run())


def test_reverse_geocode_sends_coordinates():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["agent"] = request.headers["user-agent"]
        return httpx.Response(200, json={"address": {"road": "MG Road", "city": "Bengaluru"}})

    assert _geocode(handler) == "MG Road, Bengaluru"
    assert seen["params"]["lat"] == "1.5"
    assert seen["params"]["lon"] == "2.5"
    assert seen["agent"] == "test-agent"


def test_reverse_geocode_never_raises():
    assert _geocode(lambda request: httpx.Response(503)) == PLACEHOLDER
    assert _geocode(lambda request: httpx.Response(200, text="not json")) == PLACEHOLDER
