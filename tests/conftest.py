import sys
import pytest
from pathlib import Path

# Allow the import of support modules for tests
sys.path.append(str(Path(__file__).resolve().parent))

from support_modules.test_tools.fixtures import FuzzingConfig

from voltypegen.config import GeneratorConfig
from voltypegen.generator import TypeGenerator


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig(seed=1)


@pytest.fixture
def generator(config) -> TypeGenerator:
    return TypeGenerator(config)


# Fuzzing testsuite

def pytest_addoption(parser):
    parser.addoption("--fuzzing", action="store", nargs='*', type=str, help="You can specify FuzzingConfig parameters: num_types=100000 type_seed=7 parent=array verbose=True")


def pytest_configure(config):
    config.addinivalue_line("markers", "fuzzing: long randomized run, needs the --fuzzing option")


def pytest_runtest_setup(item):
    if 'fuzzing' in item.keywords and item.config.getoption("fuzzing") is None:
        pytest.skip("need --fuzzing option to run this test")


@pytest.fixture
def fuzzing_config(pytestconfig) -> FuzzingConfig:
    assert "fuzzing" in pytestconfig.option
    data = {}
    for arg in pytestconfig.getoption("fuzzing"):
        name, value = arg.split('=')
        if name in ["num_types", "type_seed", "max_depth"]:
            value = int(value)
        elif name in ["verbose"]:
            value = value.lower() in ["1", "true", "yes"]
        elif name in ["parent"]:
            pass
        else:
            raise ValueError(f"Unknown config item {name}")
        data[name] = value
    return FuzzingConfig(**data)
