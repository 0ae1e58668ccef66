from shopbot.sessions import InMemorySessionRegistry, WizardAction, WizardSession, WizardStep


def test_get_set_clear():
    registry = InMemorySessionRegistry()
    assert registry.get(1) is None

    session = WizardSession(action=WizardAction.ADD)
    registry.set(1, session)
    assert registry.get(1) is session
    assert registry.get(2) is None

    registry.clear(1)
    assert registry.get(1) is None


def test_set_replaces_existing_session():
    registry = InMemorySessionRegistry()
    registry.set(1, WizardSession(action=WizardAction.ADD, step=WizardStep.PHOTO, name="Old", description="Old"))
    registry.set(1, WizardSession(action=WizardAction.EDIT, product_id=9))

    session = registry.get(1)
    assert session.action is WizardAction.EDIT
    assert session.step is WizardStep.NAME
    assert session.name is None and session.description is None


def test_clear_unknown_user_is_noop():
    registry = InMemorySessionRegistry()
    registry.set(1, WizardSession(action=WizardAction.ADD))
    registry.clear(99)
    assert registry.get(1) is not None
    assert registry.get(99) is None
