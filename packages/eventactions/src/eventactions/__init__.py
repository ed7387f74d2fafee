"""
Event Actions - event publish/dispatch engine

Callers register named events and actions (webhooks or code runners)
subscribed to them. Publishing an event fans the payload out to every
subscribed action concurrently over a bounded worker pool; one failing
action never blocks the others.

Persistence, permissions and the HTTP API edge are collaborators reached
through the interfaces in eventactions.persistence and eventactions.metrics.
"""
