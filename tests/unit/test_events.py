"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from route_cert_operator.utils.events import emit_event, emit_failure, emit_success

ROUTE = {"apiVersion": "route.openshift.io/v1", "kind": "Route", "metadata": {"name": "web", "namespace": "ns"}}


class TestEmitEvent:
    """Test cases for emit_event function."""

    def test_emit_event_normal(self, mock_kopf_event):
        """Test emitting normal event."""
        emit_event(ROUTE, "TestReason", "Test message")

        mock_kopf_event.assert_called_once_with(
            ROUTE,
            reason="TestReason",
            message="Test message",
            type="Normal",
        )

    def test_emit_event_warning(self, mock_kopf_event):
        """Test emitting warning event."""
        emit_event(ROUTE, "ErrorReason", "Error occurred", type_="Warning")

        mock_kopf_event.assert_called_once_with(
            ROUTE,
            reason="ErrorReason",
            message="Error occurred",
            type="Warning",
        )


class TestOutcomeEvents:
    """Success and failure events carry the action in their message."""

    def test_emit_success(self, mock_kopf_event):
        emit_success(ROUTE, "Create", "MissingCertificate", "Created Certificate cert-manager/web.example.com-cert")

        mock_kopf_event.assert_called_once_with(
            ROUTE,
            reason="MissingCertificate",
            message="Create: Created Certificate cert-manager/web.example.com-cert",
            type="Normal",
        )

    def test_emit_failure(self, mock_kopf_event):
        emit_failure(ROUTE, "Patch", "InvalidRouteTLS", "Error populating TLS for Route ns/web: boom")

        kwargs = mock_kopf_event.call_args.kwargs
        assert kwargs["type"] == "Warning"
        assert kwargs["reason"] == "InvalidRouteTLS"
        assert kwargs["message"] == "Patch: Error populating TLS for Route ns/web: boom"
