"""
Tests for the event and action registries over the SQL store.
"""

import pytest
from cryptography.fernet import Fernet

from basecore.settings import Settings
from eventactions.contracts.forms import CreateEventActionForm
from eventactions.contracts.types import ActionType
from eventactions.errors import DuplicateNameError, NotFoundError, ValidationError
from eventactions.metrics import UsageStats
from eventactions.persistence.models import EventActionModel, EventActionRegistration
from eventactions.persistence.repo import SQLEventActionsStore
from eventactions.service.bootstrap import provide_services
from eventactions.service.registry import ActionRegistry


def _webhook(name="hook", events=("user.created",), **overrides):
    form = {
        "name": name,
        "type": "webhook",
        "url": f"http://hooks.example.com/{name}",
        "registered_events": list(events),
    }
    form.update(overrides)
    return form


def _code(name="runner", events=("user.created",), **overrides):
    form = {
        "name": name,
        "type": "code",
        "url": "http://runner.example.com",
        "script": "print(1)",
        "script_language": "python",
        "runner_secret": "s3cret",
        "registered_events": list(events),
    }
    form.update(overrides)
    return form


class TestEventRegistry:
    """Tests for registering and unregistering events."""

    def test_register_and_list(self, event_registry):
        event_registry.register_event("user.created", 1)
        event_registry.register_event("order.paid", 1)
        event_registry.register_event("invoice.sent", 2)

        events = event_registry.list_events(1)

        assert [e.name for e in events] == ["order.paid", "user.created"]
        assert all(e.org_id == 1 for e in events)
        assert events[0].id is not None
        assert events[0].created_at is not None

    def test_duplicate_name(self, event_registry):
        event_registry.register_event("user.created", 1)

        with pytest.raises(DuplicateNameError):
            event_registry.register_event("user.created", 2)

    def test_names_are_case_sensitive(self, event_registry):
        event_registry.register_event("user.created", 1)
        event_registry.register_event("User.Created", 1)

        assert len(event_registry.list_events(1)) == 2

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, event_registry, name):
        with pytest.raises(ValidationError):
            event_registry.register_event(name, 1)

    def test_unregister(self, event_registry):
        event_registry.register_event("user.created", 1)

        event_registry.unregister_event("user.created")

        assert event_registry.list_events(1) == []

    def test_unregister_missing(self, event_registry):
        with pytest.raises(NotFoundError):
            event_registry.unregister_event("nope")

    def test_unregister_drops_subscriptions(self, event_registry, action_registry):
        event_registry.register_event("user.created", 1)
        action_registry.create_action(1, _webhook())

        event_registry.unregister_event("user.created")

        assert action_registry.get_actions_by_event(1, "user.created") == []
        assert action_registry.get_action_by_name(1, "hook").registered_events == []


class TestActionRegistry:
    """Tests for creating, deleting and looking up actions."""

    @pytest.fixture(autouse=True)
    def events(self, event_registry):
        event_registry.register_event("user.created", 1)
        event_registry.register_event("order.paid", 1)

    def test_create_webhook(self, action_registry):
        action = action_registry.create_action(1, _webhook(events=["user.created", "order.paid"]))

        assert action.id is not None
        assert action.type == "webhook"
        assert action.url == "http://hooks.example.com/hook"
        assert action.registered_events == ["order.paid", "user.created"]

    def test_create_code(self, action_registry):
        action = action_registry.create_action(1, _code())

        assert action.type == "code"
        assert action.script == "print(1)"
        assert action.script_language == "python"
        assert action.runner_secret == "s3cret"
        assert action.entrypoint == "file1"

    def test_create_from_form(self, action_registry):
        form = CreateEventActionForm(name="typed", type=ActionType.WEBHOOK, url="https://h/x")

        action = action_registry.create_action(1, form)

        assert action.name == "typed"
        assert action.registered_events == []

    @pytest.mark.parametrize("missing", ["script", "script_language", "runner_secret"])
    def test_code_requires_runner_fields(self, action_registry, missing):
        with pytest.raises(ValidationError) as exc_info:
            action_registry.create_action(1, _code(**{missing: None}))

        assert missing in exc_info.value.message

    @pytest.mark.parametrize("url", ["not-a-url", "ftp://h/x", "http://"])
    def test_invalid_url(self, action_registry, url):
        with pytest.raises(ValidationError):
            action_registry.create_action(1, _webhook(url=url))

    def test_invalid_type(self, action_registry):
        with pytest.raises(ValidationError):
            action_registry.create_action(1, _webhook(type="email"))

    def test_unregistered_event(self, action_registry):
        with pytest.raises(ValidationError) as exc_info:
            action_registry.create_action(1, _webhook(events=["missing.event"]))

        assert exc_info.value.details["name"] == "missing.event"

    def test_duplicate_name_in_org(self, action_registry):
        action_registry.create_action(1, _webhook())

        with pytest.raises(DuplicateNameError):
            action_registry.create_action(1, _webhook())

    def test_same_name_in_other_org(self, action_registry):
        action_registry.create_action(1, _webhook())

        other = action_registry.create_action(2, _webhook())

        assert other.org_id == 2

    def test_get_by_name(self, action_registry):
        created = action_registry.create_action(1, _webhook())

        assert action_registry.get_action_by_name(1, "hook") == created

    def test_get_by_name_missing(self, action_registry):
        with pytest.raises(NotFoundError):
            action_registry.get_action_by_name(1, "nope")

    def test_get_by_name_is_org_scoped(self, action_registry):
        action_registry.create_action(1, _webhook())

        with pytest.raises(NotFoundError):
            action_registry.get_action_by_name(2, "hook")

    def test_get_by_event(self, action_registry):
        action_registry.create_action(1, _webhook("a", events=["user.created"]))
        action_registry.create_action(1, _code("b", events=["user.created", "order.paid"]))
        action_registry.create_action(1, _webhook("c", events=["order.paid"]))
        action_registry.create_action(2, _webhook("d", events=["user.created"]))

        names = [a.name for a in action_registry.get_actions_by_event(1, "user.created")]

        assert names == ["a", "b"]
        assert action_registry.get_actions_by_event(1, "nothing") == []

    def test_delete(self, action_registry, db_session):
        action = action_registry.create_action(1, _webhook())

        action_registry.delete_action(1, action.id)

        assert action_registry.get_actions_by_event(1, "user.created") == []
        assert db_session.query(EventActionRegistration).count() == 0

    def test_delete_missing(self, action_registry):
        with pytest.raises(NotFoundError):
            action_registry.delete_action(1, 999)

    def test_delete_is_org_scoped(self, action_registry):
        action = action_registry.create_action(1, _webhook())

        with pytest.raises(NotFoundError):
            action_registry.delete_action(2, action.id)


class TestRunnerSecretEncryption:
    """Tests for runner secrets at rest."""

    def test_secret_encrypted_at_rest(self, db_session, event_registry):
        event_registry.register_event("user.created", 1)
        key = Fernet.generate_key().decode()
        registry = ActionRegistry(SQLEventActionsStore(db_session, encryption_key=key))

        action = registry.create_action(1, _code())

        stored = db_session.query(EventActionModel).filter_by(id=action.id).one().runner_secret
        assert stored != "s3cret"
        assert Fernet(key.encode()).decrypt(stored.encode()).decode() == "s3cret"
        assert registry.get_action_by_name(1, "runner").runner_secret == "s3cret"

    def test_plaintext_secret_without_key(self, db_session, action_registry, event_registry):
        event_registry.register_event("user.created", 1)

        action = action_registry.create_action(1, _code())

        stored = db_session.query(EventActionModel).filter_by(id=action.id).one().runner_secret
        assert stored == "s3cret"


class TestUsageMetrics:
    """Tests for usage metrics reporting."""

    def test_store_metrics(self, store, event_registry, action_registry):
        event_registry.register_event("user.created", 1)
        action_registry.create_action(1, _webhook("a"))
        action_registry.create_action(1, _webhook("b"))
        action_registry.create_action(1, _code("c"))

        assert store.get_usage_metrics() == {
            "stats.events.count": 1,
            "stats.eventactions.count": 3,
            "stats.eventactions.code.count": 1,
            "stats.eventactions.webhook.count": 2,
        }

    def test_registered_once_at_startup(self, db_session):
        usage_stats = UsageStats()

        services = provide_services(db_session, settings=Settings(EVENTACTIONS_WORKERS=4), usage_stats=usage_stats)
        services.events.register_event("user.created", 1)

        report = usage_stats.get_usage_report()
        assert report["stats.events.count"] == 1
        assert report["stats.eventactions.count"] == 0
        assert services.dispatcher.workers == 4

    def test_failing_producer_is_skipped(self):
        usage_stats = UsageStats()

        def broken():
            raise RuntimeError("no database")

        usage_stats.register_metrics_func(broken)
        usage_stats.register_metrics_func(lambda: {"x": 1})

        assert usage_stats.get_usage_report() == {"x": 1}
