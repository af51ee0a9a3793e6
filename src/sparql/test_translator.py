"""
Unit test for the SPARQL translation service.

HOW TO RUN:
The virtual environment .venv should be activated before running the tests.

From the src directory, run:
    python -m sparql.test_translator

Or from the project root:
    cd src; python -m sparql.test_translator
"""

from typing import List, Tuple

from substructure.domain import (
    DataSpecificationSubstructure, SubstructureClass, SubstructureObjectProperty,
    SubstructureDatatypeProperty, SubstructureIntegrityError, UserSelection
)

from .translator import SparqlTranslationService, to_variable


EX = "http://example.com/"


def build_graph(edges: List[Tuple[str, List[str]]]) -> DataSpecificationSubstructure:
    """Build a substructure of classes "Class <name>" with edges "<from> to <to>"."""
    class_items = []
    for name, targets in edges:
        class_items.append(SubstructureClass(
            iri=f"{EX}Class{name}",
            label=f"Class {name}",
            object_properties=[
                SubstructureObjectProperty(
                    iri=f"{EX}prop{name}to{target}",
                    label=f"{name} to {target}",
                    domain=f"{EX}Class{name}",
                    domain_label=f"Class {name}",
                    range=f"{EX}Class{target}",
                    range_label=f"Class {target}"
                )
                for target in targets
            ]
        ))
    return DataSpecificationSubstructure(class_items=class_items)


def build_vehicle_substructure() -> DataSpecificationSubstructure:
    substructure = DataSpecificationSubstructure()
    vehicle = substructure.add_class(EX + "Vehicle", "Vehicle")
    substructure.add_class(EX + "Person", "Person")
    vehicle.object_properties.append(SubstructureObjectProperty(
        iri=EX + "hasOwner",
        label="has owner",
        domain=EX + "Vehicle",
        domain_label="Vehicle",
        range=EX + "Person",
        range_label="Person"
    ))
    vehicle.datatype_properties.append(SubstructureDatatypeProperty(
        iri=EX + "curbWeight",
        label="curb weight",
        domain=EX + "Vehicle",
        domain_label="Vehicle",
        range="http://www.w3.org/2001/XMLSchema#decimal"
    ))
    return substructure


def test_two_disjoint_cycles():
    """Test a graph made of two separate cycles."""
    print("Testing two disjoint cycles...")

    substructure = build_graph([
        ("A", ["B"]), ("B", ["C"]), ("C", ["A"]),
        ("X", ["Y"]), ("Y", ["Z"]), ("Z", ["X"]),
    ])

    sparql = SparqlTranslationService().translate_substructure(substructure)

    expected = (
        "SELECT DISTINCT *\n"
        "WHERE {\n"
        "  # Class A\n"
        "  ?Class_A a <http://example.com/ClassA> .\n"
        "  ?Class_A <http://example.com/propAtoB> ?Class_B .\n"
        "  # Class B\n"
        "  ?Class_B a <http://example.com/ClassB> .\n"
        "  ?Class_B <http://example.com/propBtoC> ?Class_C .\n"
        "  # Class C\n"
        "  ?Class_C a <http://example.com/ClassC> .\n"
        "  ?Class_C <http://example.com/propCtoA> ?Class_A .\n"
        "  # Class X\n"
        "  ?Class_X a <http://example.com/ClassX> .\n"
        "  ?Class_X <http://example.com/propXtoY> ?Class_Y .\n"
        "  # Class Y\n"
        "  ?Class_Y a <http://example.com/ClassY> .\n"
        "  ?Class_Y <http://example.com/propYtoZ> ?Class_Z .\n"
        "  # Class Z\n"
        "  ?Class_Z a <http://example.com/ClassZ> .\n"
        "  ?Class_Z <http://example.com/propZtoX> ?Class_X .\n"
        "}\n"
    )
    assert sparql == expected

    print("✓ Disjoint cycles translated correctly")


def test_two_overlapping_cycles():
    """Test two cycles sharing a class; ranges are visited depth-first."""
    print("Testing two overlapping cycles...")

    substructure = build_graph([
        ("A", ["B"]), ("B", ["C", "Y"]), ("C", ["A"]),
        ("X", ["B"]), ("Y", ["X"]),
    ])

    sparql = SparqlTranslationService().translate_substructure(substructure)

    expected = (
        "SELECT DISTINCT *\n"
        "WHERE {\n"
        "  # Class A\n"
        "  ?Class_A a <http://example.com/ClassA> .\n"
        "  ?Class_A <http://example.com/propAtoB> ?Class_B .\n"
        "  # Class B\n"
        "  ?Class_B a <http://example.com/ClassB> .\n"
        "  ?Class_B <http://example.com/propBtoC> ?Class_C .\n"
        "  # Class C\n"
        "  ?Class_C a <http://example.com/ClassC> .\n"
        "  ?Class_C <http://example.com/propCtoA> ?Class_A .\n"
        "  ?Class_B <http://example.com/propBtoY> ?Class_Y .\n"
        "  # Class Y\n"
        "  ?Class_Y a <http://example.com/ClassY> .\n"
        "  ?Class_Y <http://example.com/propYtoX> ?Class_X .\n"
        "  # Class X\n"
        "  ?Class_X a <http://example.com/ClassX> .\n"
        "  ?Class_X <http://example.com/propXtoB> ?Class_B .\n"
        "}\n"
    )
    assert sparql == expected

    print("✓ Overlapping cycles translated correctly")


def test_empty_substructure():
    """Test that an empty substructure gives an empty pattern."""
    print("Testing empty substructure...")

    sparql = SparqlTranslationService().translate_substructure(DataSpecificationSubstructure())
    assert sparql == "SELECT DISTINCT *\nWHERE {\n}\n"

    print("✓ Empty substructure translated correctly")


def test_translation_is_deterministic():
    """Test that repeated translation gives identical text and leaves the input alone."""
    print("Testing deterministic translation...")

    substructure = build_graph([("A", ["B", "A"]), ("B", ["A"])])
    snapshot = substructure.model_copy(deep=True)
    service = SparqlTranslationService()

    first = service.translate_substructure(substructure)
    second = service.translate_substructure(substructure)

    assert first == second
    assert substructure == snapshot

    print("✓ Translation is deterministic")


def test_each_class_typed_once():
    """Test that self loops and back edges do not repeat the type triple."""
    print("Testing single type triple per class...")

    substructure = build_graph([("A", ["A", "B"]), ("B", ["A", "B"])])
    sparql = SparqlTranslationService().translate_substructure(substructure)

    assert sparql.count("a <http://example.com/ClassA> .") == 1
    assert sparql.count("a <http://example.com/ClassB> .") == 1
    assert sparql.count("# Class A") == 1
    # Every edge still appears
    for edge in ("AtoA", "AtoB", "BtoA", "BtoB"):
        assert sparql.count(f"<http://example.com/prop{edge}>") == 1

    print("✓ Each class typed exactly once")


def test_datatype_properties_use_label_variable():
    """Test datatype property lines and variable naming."""
    print("Testing datatype property lines...")

    sparql = SparqlTranslationService().translate_substructure(build_vehicle_substructure())
    lines = sparql.splitlines()

    assert lines[2:9] == [
        "  # Vehicle",
        "  ?Vehicle a <http://example.com/Vehicle> .",
        "  ?Vehicle <http://example.com/hasOwner> ?Person .",
        "  # Person",
        "  ?Person a <http://example.com/Person> .",
        "  ?Vehicle <http://example.com/curbWeight> ?curb_weight .",
        "}",
    ]
    assert to_variable("Class of vehicle") == "Class_of_vehicle"

    print("✓ Datatype property lines working correctly")


def test_missing_range_class_raises():
    """Test that a dangling object property range is reported."""
    print("Testing missing range class...")

    substructure = build_graph([("A", ["B"])])

    try:
        SparqlTranslationService().translate_substructure(substructure)
        assert False, "Expected SubstructureIntegrityError"
    except SubstructureIntegrityError as e:
        assert "http://example.com/ClassB" in str(e)

    print("✓ Missing range class raises correctly")


def test_optional_and_filter_selections():
    """Test OPTIONAL blocks and FILTER clauses built from user selections."""
    print("Testing optional and filter selections...")

    selections = [
        UserSelection(selected_property_iri=EX + "hasOwner", is_optional=True),
        UserSelection(selected_property_iri=EX + "curbWeight",
                      filter_expression="{?var} > 1500"),
    ]

    sparql = SparqlTranslationService().translate_substructure(
        build_vehicle_substructure(), selections)

    expected = (
        "SELECT DISTINCT *\n"
        "WHERE {\n"
        "  # Vehicle\n"
        "  ?Vehicle a <http://example.com/Vehicle> .\n"
        "  OPTIONAL {\n"
        "    ?Vehicle <http://example.com/hasOwner> ?Person .\n"
        "    # Person\n"
        "    ?Person a <http://example.com/Person> .\n"
        "  }\n"
        "  ?Vehicle <http://example.com/curbWeight> ?curb_weight .\n"
        "  FILTER(?curb_weight > 1500)\n"
        "}\n"
    )
    assert sparql == expected

    print("✓ Optional and filter selections working correctly")


def test_optional_filtered_datatype_property():
    """Test a selection that is both optional and filtered."""
    print("Testing optional filtered datatype property...")

    selections = [
        UserSelection(selected_property_iri=EX + "curbWeight", is_optional=True,
                      filter_expression="{?var} < 2000 && {?var} > 100"),
    ]

    sparql = SparqlTranslationService(indent="\t").translate_substructure(
        build_vehicle_substructure(), selections)

    assert (
        "\tOPTIONAL {\n"
        "\t\t?Vehicle <http://example.com/curbWeight> ?curb_weight .\n"
        "\t\tFILTER(?curb_weight < 2000 && ?curb_weight > 100)\n"
        "\t}\n"
    ) in sparql

    print("✓ Optional filtered property working correctly")


def build_owner_substructure(with_dealer: bool) -> DataSpecificationSubstructure:
    """Vehicle -has owner-> Person with a filtered age, optionally Dealer -has customer-> Person."""
    substructure = DataSpecificationSubstructure()
    vehicle = substructure.add_class(EX + "Vehicle", "Vehicle")
    person = substructure.add_class(EX + "Person", "Person")
    vehicle.object_properties.append(SubstructureObjectProperty(
        iri=EX + "hasOwner", label="has owner",
        domain=EX + "Vehicle", domain_label="Vehicle",
        range=EX + "Person", range_label="Person"
    ))
    person.datatype_properties.append(SubstructureDatatypeProperty(
        iri=EX + "age", label="age",
        domain=EX + "Person", domain_label="Person",
        range="http://www.w3.org/2001/XMLSchema#integer"
    ))
    if with_dealer:
        dealer = substructure.add_class(EX + "Dealer", "Dealer")
        dealer.object_properties.append(SubstructureObjectProperty(
            iri=EX + "hasCustomer", label="has customer",
            domain=EX + "Dealer", domain_label="Dealer",
            range=EX + "Person", range_label="Person"
        ))
    return substructure


OWNER_SELECTIONS = [
    UserSelection(selected_property_iri=EX + "hasOwner", is_optional=True),
    UserSelection(selected_property_iri=EX + "age", filter_expression="{?var} > 18"),
]


def test_class_reached_only_optionally_is_nested():
    """Test that a range class reached only through an OPTIONAL edge stays inside the block."""
    print("Testing class nested in OPTIONAL block...")

    sparql = SparqlTranslationService().translate_substructure(
        build_owner_substructure(with_dealer=False), OWNER_SELECTIONS)

    expected = (
        "SELECT DISTINCT *\n"
        "WHERE {\n"
        "  # Vehicle\n"
        "  ?Vehicle a <http://example.com/Vehicle> .\n"
        "  OPTIONAL {\n"
        "    ?Vehicle <http://example.com/hasOwner> ?Person .\n"
        "    # Person\n"
        "    ?Person a <http://example.com/Person> .\n"
        "    ?Person <http://example.com/age> ?age .\n"
        "    FILTER(?age > 18)\n"
        "  }\n"
        "}\n"
    )
    assert sparql == expected

    print("✓ Class nested in OPTIONAL block correctly")


def test_mandatory_edge_keeps_range_filter_outside_optional():
    """Test that a class with a mandatory incoming edge is not nested in an OPTIONAL block."""
    print("Testing mandatory filter stays outside OPTIONAL block...")

    sparql = SparqlTranslationService().translate_substructure(
        build_owner_substructure(with_dealer=True), OWNER_SELECTIONS)

    expected = (
        "SELECT DISTINCT *\n"
        "WHERE {\n"
        "  # Vehicle\n"
        "  ?Vehicle a <http://example.com/Vehicle> .\n"
        "  OPTIONAL {\n"
        "    ?Vehicle <http://example.com/hasOwner> ?Person .\n"
        "  }\n"
        "  # Person\n"
        "  ?Person a <http://example.com/Person> .\n"
        "  ?Person <http://example.com/age> ?age .\n"
        "  FILTER(?age > 18)\n"
        "  # Dealer\n"
        "  ?Dealer a <http://example.com/Dealer> .\n"
        "  ?Dealer <http://example.com/hasCustomer> ?Person .\n"
        "}\n"
    )
    assert sparql == expected

    print("✓ Mandatory filter kept outside OPTIONAL block")


def test_long_chain_translates():
    """Test that a chain far deeper than the interpreter's recursion limit is translated."""
    print("Testing long class chain...")

    length = 3000
    substructure = build_graph(
        [(str(i), [str(i + 1)]) for i in range(length - 1)] + [(str(length - 1), [])]
    )

    lines = SparqlTranslationService().translate_substructure(substructure).splitlines()

    assert len(lines) == 3 + 2 * length + (length - 1)
    assert lines[2] == "  # Class 0"
    assert lines[5] == "  # Class 1"
    assert lines[-2] == f"  ?Class_{length - 1} a <http://example.com/Class{length - 1}> ."

    print("✓ Long class chain translated correctly")


def run_all_tests():
    """Run all SPARQL translation tests."""
    print("=" * 50)
    print("Running SparqlTranslationService Tests")
    print("=" * 50)

    test_functions = [
        test_two_disjoint_cycles,
        test_two_overlapping_cycles,
        test_empty_substructure,
        test_translation_is_deterministic,
        test_each_class_typed_once,
        test_datatype_properties_use_label_variable,
        test_missing_range_class_raises,
        test_optional_and_filter_selections,
        test_optional_filtered_datatype_property,
        test_class_reached_only_optionally_is_nested,
        test_mandatory_edge_keeps_range_filter_outside_optional,
        test_long_chain_translates,
    ]

    passed = 0
    failed = 0

    for test_func in test_functions:
        try:
            test_func()
            passed += 1
        except Exception as e:
            print(f"✗ {test_func.__name__} FAILED: {e}")
            failed += 1

    print("=" * 50)
    print(f"Test Results: {passed} passed, {failed} failed")
    print("=" * 50)

    return failed == 0


if __name__ == "__main__":
    exit(0 if run_all_tests() else 1)
