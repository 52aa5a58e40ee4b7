"""Tests for structured logging helpers."""

import logging

from structlog.testing import capture_logs

from seowatch.utils.logging import get_structured_logger, setup_logging


def test_events_carry_logger_name_and_bound_context():
    log = get_structured_logger("seowatch.scheduler").bind(page_id="home-en")

    with capture_logs() as captured:
        log.error("Scheduled run finished with errors", errors=["boom"])

    assert captured == [
        {
            "event": "Scheduled run finished with errors",
            "log_level": "error",
            "logger": "seowatch.scheduler",
            "page_id": "home-en",
            "errors": ["boom"],
        }
    ]


def test_bind_does_not_mutate_parent():
    parent = get_structured_logger("seowatch.cdn")
    child = parent.bind(provider="Cloudflare")

    assert parent.context == {}
    assert child.context == {"provider": "Cloudflare"}


def test_setup_logging_quiets_job_runner_logs():
    setup_logging("DEBUG")
    assert logging.getLogger("apscheduler").level == logging.WARNING

    setup_logging("ERROR")
    assert logging.getLogger("apscheduler").level == logging.ERROR


def test_request_fields_named_like_logger_parameters():
    log = get_structured_logger("seowatch.api.middleware")

    with capture_logs() as captured:
        log.info("HTTP request", method="GET", path="/health", event_id="e-1")

    assert captured[0]["event"] == "HTTP request"
    assert captured[0]["method"] == "GET"
    assert captured[0]["event_id"] == "e-1"
