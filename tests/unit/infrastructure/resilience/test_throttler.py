import pytest

from reqflow.domain.models.common import DEFAULT_ENDPOINT_CLASS
from reqflow.domain.models.request import RequestDescriptor
from reqflow.infrastructure.resilience.throttler import RequestThrottler


def req(url):
    return RequestDescriptor("GET", url)


@pytest.fixture
def throttler(clock):
    return RequestThrottler(
        interval_table=[("/api/auth/", 2.0), ("/api/students", 0.5), ("/api/classes", 0.5)],
        default_interval=0.3,
        clock=clock,
    )


def test_auth_calls_are_paced(throttler, clock):
    assert throttler.delay_required(req("/api/auth/login")) == 0.0
    clock.advance(0.5)
    assert throttler.delay_required(req("/api/auth/login")) == pytest.approx(1.5)


def test_throttled_call_does_not_advance_timestamp(throttler, clock):
    throttler.delay_required(req("/api/auth/login"))
    clock.advance(0.5)
    throttler.delay_required(req("/api/auth/me"))
    clock.advance(0.1)
    assert throttler.delay_required(req("/api/auth/login")) == pytest.approx(1.4)
    assert throttler.last_dispatch["/api/auth/"] == 0.0


def test_call_after_full_interval_is_not_delayed(throttler, clock):
    throttler.delay_required(req("/api/auth/login"))
    clock.advance(0.5)
    throttler.delay_required(req("/api/auth/login"))
    clock.advance(1.5)
    assert throttler.delay_required(req("/api/auth/login")) == 0.0
    assert throttler.last_dispatch["/api/auth/"] == 2.0


def test_classes_are_tracked_independently(throttler, clock):
    assert throttler.delay_required(req("/api/students")) == 0.0
    assert throttler.delay_required(req("/api/classes")) == 0.0
    assert throttler.delay_required(req("/api/students/4")) == pytest.approx(0.5)


def test_unmatched_urls_share_default_class(throttler):
    assert throttler.endpoint_class("/api/health") == DEFAULT_ENDPOINT_CLASS
    assert throttler.delay_required(req("/api/health")) == 0.0
    assert throttler.delay_required(req("/api/dashboard")) == pytest.approx(0.3)


def test_largest_matching_interval_governs(clock):
    throttler = RequestThrottler(
        interval_table=[("/api/auth/", 2.0), ("/api/auth/login", 0.5)],
        default_interval=0.1,
        clock=clock,
    )
    assert throttler.endpoint_class("/api/auth/login") == "/api/auth/login"
    assert throttler.min_interval("/api/auth/login") == 2.0
    throttler.delay_required(req("/api/auth/login"))
    clock.advance(1.0)
    assert throttler.delay_required(req("/api/auth/login")) == pytest.approx(1.0)


def test_matching_uses_path_of_absolute_urls(throttler):
    assert throttler.endpoint_class("http://localhost:3000/api/auth/login?x=1") == "/api/auth/"


def test_reset_forgets_dispatches(throttler):
    throttler.delay_required(req("/api/auth/login"))
    throttler.reset()
    assert throttler.delay_required(req("/api/auth/login")) == 0.0
