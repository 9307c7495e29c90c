import threading
import pytest
from concurrent.futures import ThreadPoolExecutor
from random import Random

from support_modules.test_tools.checks import check_datatype, max_level
from support_modules.test_tools.fixtures import ScriptedRandom

import voltypegen
from voltypegen.core import GenerationError
from voltypegen.config import GeneratorConfig, STRING_TYPE_MAX_SIZE, TYPE_GEN_RECURSION_MAX_DEPTH
from voltypegen.generator import TypeGenerator, _Owned
from voltypegen.printers import Stream
from voltypegen.types import (
    TypeKind, ArrayType, CompoundType, EnumType, IntegerType, FloatType, StringType,
    ReferenceType, ReferenceKind, StringPad, NATIVE_INT, walk
)


class RecordingGenerator(TypeGenerator):
    """Remembers every datatype returned by a (nested) generation call."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.created = []

    def _generate(self, parent_kind, depth):
        datatype = super()._generate(parent_kind, depth)
        self.created.append(datatype)
        return datatype


def test_many_types_with_fixed_seed():
    config = GeneratorConfig(seed=1234)
    generator = TypeGenerator(config)
    log = Stream()

    for _ in range(10000):
        datatype = generator.generate()
        assert check_datatype(log, datatype, config), log.string
        for _, d in walk(datatype):
            if isinstance(d, StringType) and not d.is_variable_length:
                assert d.length < STRING_TYPE_MAX_SIZE
        datatype.close()


def test_array_parent_only_gives_valid_elements():
    config = GeneratorConfig(seed=99)
    generator = TypeGenerator(config)
    log = Stream()

    for _ in range(2000):
        datatype = generator.generate(TypeKind.Array)
        assert datatype.kind in (TypeKind.Integer, TypeKind.Float, TypeKind.String)
        assert check_datatype(log, datatype, config, TypeKind.Array), log.string


def test_every_supported_kind_is_generated(generator):
    kinds = set()
    for _ in range(2000):
        kinds.update(d.kind for _, d in walk(generator.generate()))

    assert kinds == {
        TypeKind.Integer, TypeKind.Float, TypeKind.String, TypeKind.Compound,
        TypeKind.Reference, TypeKind.Enum, TypeKind.Array
    }


@pytest.mark.parametrize("max_depth", [1, 2, TYPE_GEN_RECURSION_MAX_DEPTH])
def test_recursion_depth_is_bounded(max_depth):
    config = GeneratorConfig(seed=max_depth, max_depth=max_depth)
    generator = TypeGenerator(config)
    log = Stream()

    deepest = 0
    for _ in range(3000):
        datatype = generator.generate()
        assert check_datatype(log, datatype, config), log.string
        deepest = max(deepest, max_level(datatype))

    assert deepest <= max_depth


def test_same_seed_same_types():
    a = TypeGenerator(GeneratorConfig(seed=7))
    b = TypeGenerator(GeneratorConfig(seed=7))

    for _ in range(200):
        assert a.generate() == b.generate()


def test_explicit_random_source_wins_over_config_seed():
    a = TypeGenerator(GeneratorConfig(seed=1), random=Random(5))
    b = TypeGenerator(GeneratorConfig(seed=2), random=Random(5))
    assert [a.generate() for _ in range(20)] == [b.generate() for _ in range(20)]


def test_generators_in_threads_are_independent():
    def run(seed):
        generator = TypeGenerator(GeneratorConfig(seed=seed))
        return [generator.generate() for _ in range(300)]

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(run, [3, 3, 3, 3]))

    assert all(r == results[0] for r in results)


def test_rejection_cycles_through_unsupported_kinds():
    random = ScriptedRandom(kinds=[
        TypeKind.Time, TypeKind.Bitfield, TypeKind.Opaque, TypeKind.VariableLength,
        TypeKind.Time, TypeKind.Integer
    ])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, IntegerType)
    assert random.kinds == []
    assert len(random.kind_draws) == 6


def test_region_reference_is_redrawn():
    random = ScriptedRandom(kinds=[TypeKind.Reference, TypeKind.Reference, TypeKind.Float], coins=[1, 1])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, FloatType)
    assert random.coins == []


def test_object_reference():
    random = ScriptedRandom(kinds=[TypeKind.Reference], coins=[0])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, ReferenceType)
    assert datatype.ref_kind == ReferenceKind.OBJECT
    assert datatype.size == 8


@pytest.mark.parametrize("kind", [TypeKind.Array, TypeKind.Enum, TypeKind.Compound, TypeKind.Reference])
def test_array_parent_redraws(kind):
    random = ScriptedRandom(kinds=[kind, TypeKind.Integer])
    datatype = TypeGenerator(random=random).generate(TypeKind.Array)

    assert isinstance(datatype, IntegerType)
    assert random.kind_draws == [kind, TypeKind.Integer]


def test_compound_and_array_redrawn_when_too_deep():
    random = ScriptedRandom(kinds=[TypeKind.Compound, TypeKind.Array, TypeKind.Float])
    generator = TypeGenerator(random=random)

    # Pretend we are already past the recursion limit
    datatype = generator._generate(None, generator.config.max_depth + 1)

    assert isinstance(datatype, FloatType)


def test_fixed_and_variable_strings():
    random = ScriptedRandom(kinds=[TypeKind.String, TypeKind.String], coins=[0, 1])
    generator = TypeGenerator(random=random)

    fixed = generator.generate()
    variable = generator.generate()

    assert not fixed.is_variable_length
    assert 1 <= fixed.length < STRING_TYPE_MAX_SIZE
    assert fixed.pad == StringPad.NULLPAD
    assert variable.is_variable_length
    assert variable.pad == StringPad.NULLTERM


def test_enum_members():
    random = ScriptedRandom(kinds=[TypeKind.Enum], randints=[5, 10, 10, 20, 30, 40])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, EnumType)
    assert datatype.base == NATIVE_INT
    assert [m.name for m in datatype.members] == [f"enum_val{i}" for i in range(5)]
    # Values don't need to be unique
    assert [m.value for m in datatype.members] == [10, 10, 20, 30, 40]


def test_enum_after_releasing_native_int():
    voltypegen.release(NATIVE_INT)

    random = ScriptedRandom(kinds=[TypeKind.Enum], randints=[1, 3])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, EnumType)
    assert datatype.base == NATIVE_INT
    datatype.close()
    assert not NATIVE_INT.closed


def test_compound_layout():
    random = ScriptedRandom(
        kinds=[TypeKind.Compound, TypeKind.Integer, TypeKind.String, TypeKind.Float],
        randints=[3],
        coins=[1]
    )
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, CompoundType)
    assert [m.name for m in datatype.members] == ["compound_member0", "compound_member1", "compound_member2"]
    first, second, third = datatype.members
    assert first.offset == 0
    assert second.offset == first.type.size
    assert third.offset == first.type.size + 8
    assert datatype.size == first.type.size + 8 + third.type.size


def test_array_layout():
    random = ScriptedRandom(kinds=[TypeKind.Array, TypeKind.Integer], randints=[2, 3, 4])
    datatype = TypeGenerator(random=random).generate()

    assert isinstance(datatype, ArrayType)
    assert datatype.dims == (3, 4)
    assert isinstance(datatype.element, IntegerType)
    assert datatype.size == 12 * datatype.element.size


def test_oversized_array_is_redrawn():
    config = GeneratorConfig(max_size=64)
    random = ScriptedRandom(
        kinds=[TypeKind.Array, TypeKind.Float, TypeKind.Integer],
        randints=[1, 16]
    )
    generator = RecordingGenerator(config, random=random)

    datatype = generator.generate()

    assert isinstance(datatype, IntegerType)
    # The element of the abandoned array has been released
    element = generator.created[0]
    assert isinstance(element, FloatType)
    assert element.closed


def test_size_ceiling_holds():
    config = GeneratorConfig(seed=4, max_size=64, string_max_size=32)
    generator = TypeGenerator(config)

    for _ in range(2000):
        for _, d in walk(generator.generate()):
            if d.kind in (TypeKind.Compound, TypeKind.Array):
                assert d.size <= 64


def test_failed_compound_member_releases_siblings(mocker):
    original_insert = CompoundType.insert

    def failing_insert(self, name, offset, member):
        if name == "compound_member2":
            raise ValueError("out of space")
        original_insert(self, name, offset, member)

    mocker.patch.object(CompoundType, "insert", failing_insert)

    random = ScriptedRandom(
        kinds=[TypeKind.Compound, TypeKind.Integer, TypeKind.Float, TypeKind.Integer],
        randints=[3]
    )
    generator = RecordingGenerator(random=random)

    with pytest.raises(GenerationError) as exc:
        generator.generate()

    assert "compound datatype member 2" in str(exc.value)
    assert isinstance(exc.value.__cause__, ValueError)
    assert len(generator.created) == 3
    assert all(d.closed for d in generator.created)


def test_failed_array_releases_element(mocker):
    mocker.patch("voltypegen.generator.ArrayType", side_effect=MemoryError("no memory"))

    random = ScriptedRandom(kinds=[TypeKind.Array, TypeKind.Float], randints=[1, 2])
    generator = RecordingGenerator(random=random)

    with pytest.raises(GenerationError):
        generator.generate()

    assert len(generator.created) == 1
    assert generator.created[0].closed


def test_nested_failure_propagates_unchanged(mocker):
    mocker.patch("voltypegen.generator.StringType", side_effect=ValueError("bad string"))

    random = ScriptedRandom(
        kinds=[TypeKind.Compound, TypeKind.Integer, TypeKind.Compound, TypeKind.Float, TypeKind.String],
        randints=[2, 2],
        coins=[1]
    )
    generator = RecordingGenerator(random=random)

    with pytest.raises(GenerationError) as exc:
        generator.generate()

    assert "variable-length string" in str(exc.value)
    assert len(generator.created) == 2
    assert all(d.closed for d in generator.created)


def test_module_level_generator():
    voltypegen.seed(42)
    first = [voltypegen.generate_random_type() for _ in range(10)]
    voltypegen.seed(42)
    second = [voltypegen.generate_random_type() for _ in range(10)]

    assert first == second
    for datatype in first + second:
        voltypegen.release(datatype)
        assert datatype.closed


def test_module_level_generator_is_shared_safely():
    voltypegen.seed(0)
    results = []
    lock = threading.Lock()

    def run():
        for _ in range(100):
            datatype = voltypegen.generate_random_type(TypeKind.Array)
            with lock:
                results.append(datatype)

    threads = [threading.Thread(target=run) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 400
    assert all(d.kind in (TypeKind.Integer, TypeKind.Float, TypeKind.String) for d in results)


def test_configure_replaces_default_generator():
    voltypegen.configure(GeneratorConfig(seed=3, max_depth=1))
    try:
        for _ in range(500):
            assert max_level(voltypegen.generate_random_type()) <= 1
    finally:
        voltypegen.configure(GeneratorConfig())


def test_owned_scope_releases_by_identity():
    first = NATIVE_INT.copy()
    second = NATIVE_INT.copy()
    assert first == second

    with _Owned() as owned:
        owned.hold(first)
        owned.hold(second)
        assert owned.release(second) is second

    assert first.closed
    assert not second.closed
