import pytest
from rest_framework.exceptions import NotFound
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from exam_core.common.api.pagination import DefaultPagination, QueuePagination, paginate
from exam_core.submissions.models import Submission

pytestmark = pytest.mark.django_db


def drf_request(**params):
    return Request(APIRequestFactory().get("/api/v1/submissions/", params))


def ids(rows):
    return [row.id for row in rows]


@pytest.fixture
def five(make_submission, nurse_actor):
    for _ in range(5):
        make_submission(nurse_actor)
    return Submission.objects.order_by("-created_at")


def test_page_envelope(five):
    res = paginate(drf_request(page="2", limit="2"), five, ids)

    assert res.data["data"] == ids(five[2:4])
    assert res.data["pagination"] == {
        "page": 2,
        "limit": 2,
        "total_pages": 3,
        "total_items": 5,
        "has_next": True,
        "has_previous": True,
    }


def test_empty_result_has_no_pages(db):
    res = paginate(drf_request(), Submission.objects.order_by("-created_at"), ids)
    assert res.data == {
        "data": [],
        "pagination": {
            "page": 1,
            "limit": 20,
            "total_pages": 0,
            "total_items": 0,
            "has_next": False,
            "has_previous": False,
        },
    }


def test_limit_is_capped(five):
    res = paginate(drf_request(limit="1000"), five, ids)
    assert res.data["pagination"]["limit"] == DefaultPagination.max_page_size == 100


@pytest.mark.parametrize("limit", ["0", "-1", "abc"])
def test_bad_limit_falls_back_to_default(five, limit):
    res = paginate(drf_request(limit=limit), five, ids)
    assert res.data["pagination"]["limit"] == 20


def test_queue_pagination_default(five):
    res = paginate(drf_request(), five, ids, paginator=QueuePagination())
    assert res.data["pagination"]["limit"] == 50
    assert res.data["pagination"]["total_pages"] == 1


@pytest.mark.parametrize("page", ["0", "9", "abc"])
def test_invalid_page_is_not_found(five, page):
    with pytest.raises(NotFound):
        paginate(drf_request(page=page), five, ids)
