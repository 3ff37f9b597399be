"""Tests for EvacBuilder configuration and registration."""

import sys
import threading

import pytest

from evac import (
    BuilderConsumedError,
    EvacBuilder,
    EvacConfig,
    InstalledHook,
    active_hook,
    uninstall,
)


def _crash(message="fatal"):
    try:
        raise RuntimeError(message)
    except RuntimeError as exc:
        sys.excepthook(type(exc), exc, exc.__traceback__)


def _noop(info, ctx):
    pass


class TestBuilderDefaults:
    def test_empty(self):
        builder = EvacBuilder()
        assert builder.handlers == ()
        assert builder.preserves_default is False

    def test_chaining_returns_builder(self):
        builder = EvacBuilder()
        assert builder.with_handler(_noop) is builder
        assert builder.preserve_default_panic() is builder
        assert builder.include_threads(False) is builder
        assert builder.synchronize_context() is builder

    def test_handlers_kept_in_order(self):
        def first(info, ctx):
            pass

        def second(info, ctx):
            pass

        builder = EvacBuilder().with_handler(first).with_handler(second)
        assert builder.handlers == (first, second)

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError):
            EvacBuilder().with_handler("not a handler")


class TestRegister:
    def test_installs_globally(self):
        EvacBuilder().with_handler(_noop).register()
        hook = active_hook()
        assert isinstance(hook, InstalledHook)
        assert sys.excepthook == hook.excepthook
        assert threading.excepthook == hook.thread_excepthook

    def test_returns_none(self):
        assert EvacBuilder().register() is None

    def test_zero_handlers_is_allowed(self, capsys):
        EvacBuilder().register()
        _crash()
        assert capsys.readouterr().err == ""

    def test_chain_is_frozen(self):
        builder = EvacBuilder().with_handler(_noop)
        builder.register()
        chain = active_hook().chain
        assert chain.handlers == (_noop,)
        assert chain.preserve_default is False

    def test_consumed_builder_rejects_reuse(self):
        builder = EvacBuilder()
        builder.register()
        with pytest.raises(BuilderConsumedError):
            builder.register()
        with pytest.raises(BuilderConsumedError):
            builder.with_handler(_noop)
        with pytest.raises(BuilderConsumedError):
            builder.preserve_default_panic()

    def test_later_register_replaces_hook(self):
        calls = []
        EvacBuilder().with_handler(lambda info, ctx: calls.append("old")).register()
        EvacBuilder().with_handler(lambda info, ctx: calls.append("new")).register()

        _crash()

        assert calls == ["new"]

    def test_later_register_drops_previous_original(self):
        calls = []
        sys.excepthook = lambda *args: calls.append("system")
        EvacBuilder().preserve_default_panic().register()
        EvacBuilder().with_handler(lambda info, ctx: calls.append("new")).register()

        _crash()

        assert calls == ["new"]
        assert active_hook().original is None

    def test_recapture_chains_previous_evac_hook(self):
        calls = []
        EvacBuilder().with_handler(lambda info, ctx: calls.append("old")).register()
        (
            EvacBuilder()
            .with_handler(lambda info, ctx: calls.append("new"))
            .preserve_default_panic()
            .register()
        )

        _crash()

        assert calls == ["old", "new"]

    def test_replaced_by_foreign_hook(self):
        EvacBuilder().register()
        sys.excepthook = sys.__excepthook__
        assert active_hook() is None

    def test_uninstall_restores_defaults(self):
        EvacBuilder().register()
        uninstall()
        assert active_hook() is None
        assert sys.excepthook is sys.__excepthook__
        assert threading.excepthook is threading.__excepthook__


class TestFromConfig:
    def test_defaults(self):
        builder = EvacBuilder.from_config()
        builder.register()
        hook = active_hook()
        assert hook.original is None
        assert hook.include_threads is True
        assert hook.context.synchronized is False

    def test_applies_options(self):
        config = EvacConfig(
            preserve_default=True, include_threads=False, synchronize_context=True
        )
        EvacBuilder.from_config(config).register("ctx")
        hook = active_hook()
        assert hook.chain.preserve_default is True
        assert hook.original is not None
        assert hook.include_threads is False
        assert hook.context.synchronized is True
        assert hook.context.value == "ctx"
