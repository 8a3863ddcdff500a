import pytest
from unittest.mock import MagicMock

# SF City Hall in EPSG:3857
CITY_HALL_XY = (-13627636.3282, 4548279.5551)


def build_feature(case_id=1, status="Open", request_type="Graffiti", x=CITY_HALL_XY[0], y=CITY_HALL_XY[1], **extra):
    properties = {
        "case_id": case_id,
        "status": status,
        "request_type": request_type,
        "agency": "DPW",
        "address": "1 Dr Carlton B Goodlett Pl",
        "opened_ts": "2025-01-01T08:00:00Z",
        "closed_ts": None,
        "category": "Street and Sidewalk Cleaning",
        "status_notes": "",
    }
    properties.update(extra)
    return {
        "type": "Feature",
        "id": f"castro_311.{case_id}",
        "geometry": {"type": "Point", "coordinates": [x, y]},
        "properties": properties,
    }


def build_collection(features, **extra):
    collection = {"type": "FeatureCollection", "features": list(features), "numberReturned": len(features)}
    collection.update(extra)
    return collection


def build_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def make_feature():
    return build_feature


@pytest.fixture
def make_collection():
    return build_collection


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def paged_session():
    """Session mock serving pages of the given sizes, with sequential case ids."""

    def _paged_session(page_sizes):
        responses = []
        next_id = 0
        for size in page_sizes:
            features = [build_feature(case_id=next_id + i) for i in range(size)]
            next_id += size
            page = build_collection(features, totalFeatures=12345, numberMatched=12345, timeStamp="2025-06-01T00:00:00Z")
            responses.append(build_response(page))

        session = MagicMock()
        session.get.side_effect = responses
        return session

    return _paged_session
