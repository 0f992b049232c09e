"""
Fixtures used in the tests
"""
import pytest

from chainbase import ArgsManager, ChainContext, base_chain_context, g_args, setup_chain_params_base_options


@pytest.fixture()
def args_manager():
    """Fresh ArgsManager with the chain selection options registered"""
    args = ArgsManager()
    setup_chain_params_base_options(args)
    return args


@pytest.fixture()
def chain_context(args_manager):
    return ChainContext(args_manager)


@pytest.fixture(autouse=True)
def reset_global_selection():
    """Every test starts and ends without a process-wide selection"""
    base_chain_context().reset()
    g_args.clear()
    yield
    base_chain_context().reset()
    g_args.clear()
