from settings_sync.core.notifications import NotificationCenter, NotificationLevel


def test_notifications_queue_in_order():
    center = NotificationCenter()

    center.success("Settings saved successfully!")
    center.error("Failed to save settings")

    assert center.messages() == ["Settings saved successfully!", "Failed to save settings"]
    assert center.latest.level == NotificationLevel.ERROR
    assert center.messages(NotificationLevel.SUCCESS) == ["Settings saved successfully!"]


def test_dismiss_removes_single_notification():
    center = NotificationCenter()
    first = center.info("one")
    center.warning("two")

    assert center.dismiss(first.id) is True
    assert center.dismiss(first.id) is False
    assert [n.message for n in center.pending] == ["two"]


def test_dismiss_all():
    center = NotificationCenter()
    center.info("one")
    center.info("two")

    center.dismiss_all()

    assert center.pending == []
    assert center.latest is None


def test_oldest_notifications_drop_when_full():
    center = NotificationCenter(max_items=2)
    for i in range(3):
        center.info(f"message {i}")

    assert center.messages() == ["message 1", "message 2"]


def test_ids_are_unique_and_increasing():
    center = NotificationCenter()
    ids = [center.info("x").id for _ in range(3)]
    assert ids == sorted(set(ids))
