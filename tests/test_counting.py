"""Tests for gene aggregation, the cross-genome table and the counting runner."""

import pytest
from structlog.testing import capture_logs

from blast_intersections.counting import (
    GeneCountTable,
    MissingAccessionTracker,
    aggregate_genome,
    build_coverage,
    count_gene_hits,
)
from blast_intersections.errors import ParseError
from blast_intersections.genomes import AlignmentRecord, AnnotationRecord, Gene, Genome
from blast_intersections.persistence import ProvenanceTracker
from blast_intersections.config import PipelineConfig


POLICIES = ["breadth", "depth"]
REPRESENTATIONS = ["dense", "events"]


def hit(accession, start, end):
    return AlignmentRecord(accession=accession, start=start, end=end)


def gene_at(accession, name, product, start, end):
    return AnnotationRecord(
        accession=accession,
        gene=Gene(name=name, product=product),
        start=start,
        end=end,
    )


def missing_events(logs):
    return [entry for entry in logs if entry["event"] == "missing_accession"]


# ============================================================================
# Gene identity
# ============================================================================

def test_gene_equality_is_by_value():
    """Genes with equal name and product are the same key."""
    a = Gene(name="dnaA", product="replication initiator")
    b = Gene(name="dnaA", product="replication initiator")

    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert Gene(name=None, product="x") != Gene(name="x", product="x")


# ============================================================================
# Cross-genome table
# ============================================================================

def test_table_rows_are_zero_filled_to_genome_count():
    table = GeneCountTable(["G0", "G1", "G2"])
    gene = Gene(name="g1", product="p1")

    table.record(gene, 1, 4)

    assert table.get(gene) == [0, 4, 0]
    assert len(table.get(gene)) == table.genome_count


def test_table_record_sums():
    table = GeneCountTable(["G0"])
    gene = Gene(name="g1", product="p1")

    table.record(gene, 0, 2)
    table.record(gene, 0, 3)

    assert table.get(gene) == [5]


def test_table_rejects_bad_index_and_amount():
    table = GeneCountTable(["G0", "G1"])
    gene = Gene(name="g1", product="p1")

    with pytest.raises(IndexError):
        table.record(gene, 2, 1)
    with pytest.raises(IndexError):
        table.record(gene, -1, 1)
    with pytest.raises(ValueError):
        table.record(gene, 0, -1)
    assert gene not in table


def test_table_duplicate_genome_names_keep_separate_columns():
    table = GeneCountTable(["S", "S"])
    gene = Gene(name="g1", product="p1")

    table.record(gene, 0, 2)
    table.record(gene, 1, 5)

    df = table.to_frame(label_genomes=True)

    assert table.get(gene) == [2, 5]
    assert table.column_totals() == [2, 5]
    assert df.columns == ["name", "product", "genome_0", "genome_1"]
    assert df["genome_1"].to_list() == [5]


def test_table_genome_named_like_frame_column():
    """Genomes called "name" or "product" do not clobber the gene columns."""
    table = GeneCountTable(["name", "product"])
    table.record(Gene(name="g1", product="p1"), 1, 3)

    df = table.to_frame(label_genomes=True)

    assert df.columns == ["name", "product", "genome_0", "genome_1"]
    assert df["name"].to_list() == ["g1"]
    assert df["product"].to_list() == ["p1"]
    assert df["genome_1"].to_list() == [3]


def test_table_frame_positional_columns_by_default():
    table = GeneCountTable(["G0", "G1"])
    table.record(Gene(name="g1", product="p1"), 0, 1)

    assert table.to_frame().columns == ["name", "product", "genome_0", "genome_1"]


def test_table_merge_partial_result():
    """A per-genome partial result merges into the right column."""
    table = GeneCountTable(["G0", "G1"])
    g1 = Gene(name="g1", product="p1")
    g2 = Gene(name="g2", product="p2")
    table.record(g1, 0, 1)

    table.merge(1, {g1: 3, g2: 7})

    assert table.get(g1) == [1, 3]
    assert table.get(g2) == [0, 7]
    assert table.column_totals() == [1, 10]


def test_table_frame_sorted_with_unnamed_last():
    table = GeneCountTable(["G0"])
    table.record(Gene(name="zeta", product="p"), 0, 1)
    table.record(Gene(name=None, product="hypothetical protein"), 0, 2)
    table.record(Gene(name="alpha", product="b"), 0, 3)
    table.record(Gene(name="alpha", product="a"), 0, 4)

    df = table.to_frame(label_genomes=True)

    assert df.columns == ["name", "product", "G0"]
    assert df["name"].to_list() == ["alpha", "alpha", "zeta", None]
    assert df["product"].to_list() == ["a", "b", "p", "hypothetical protein"]
    assert df["G0"].to_list() == [4, 3, 1, 2]


def test_table_frame_unsorted_keeps_first_encounter_order():
    table = GeneCountTable(["G0"])
    table.record(Gene(name="zeta", product="p"), 0, 1)
    table.record(Gene(name="alpha", product="a"), 0, 2)

    df = table.to_frame(sort_rows=False)

    assert df["name"].to_list() == ["zeta", "alpha"]


def test_empty_table_frame_has_schema():
    df = GeneCountTable(["G0", "G1"]).to_frame(label_genomes=True)

    assert df.height == 0
    assert df.columns == ["name", "product", "G0", "G1"]


# ============================================================================
# Missing-accession tracker
# ============================================================================

def test_tracker_reports_once_per_accession():
    tracker = MissingAccessionTracker("G0")

    with capture_logs() as logs:
        assert tracker.report("contig_9") is True
        assert tracker.report("contig_9") is False
        assert tracker.report("contig_10") is True

    events = missing_events(logs)
    assert [e["accession"] for e in events] == ["contig_9", "contig_10"]
    assert all(e["genome"] == "G0" for e in events)
    assert all(e["log_level"] == "warning" for e in events)
    assert tracker.missing == frozenset({"contig_9", "contig_10"})


# ============================================================================
# Gene aggregation
# ============================================================================

@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_scenario_breadth_over_gene_subrange(representation):
    """Hit [0,5), gene [2,4): breadth count is 2."""
    table = GeneCountTable(["G0"])
    coverage = build_coverage([hit("A", 0, 5)], representation)

    aggregate_genome(
        [gene_at("A", "g1", "prod1", 2, 4)],
        coverage, table, 0, MissingAccessionTracker("G0"), "breadth",
    )

    assert table.get(Gene(name="g1", product="prod1")) == [2]


@pytest.mark.parametrize(
    "policy,expected",
    [("breadth", 6), ("depth", 7), ("hits", 2)],
)
@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_scenario_overlapping_hits(policy, expected, representation):
    """Coverage [1,1,2,1,1,1] over gene [0,6): breadth 6, depth 7, 2 hits."""
    table = GeneCountTable(["G0"])
    coverage = build_coverage([hit("A", 0, 3), hit("A", 2, 6)], representation)

    aggregate_genome(
        [gene_at("A", "g1", "prod1", 0, 6)],
        coverage, table, 0, MissingAccessionTracker("G0"), policy,
    )

    assert table.get(Gene(name="g1", product="prod1")) == [expected]


@pytest.mark.parametrize("policy", POLICIES)
def test_same_gene_twice_in_one_genome_is_summed(policy):
    """Counts 2 and 3 for the same gene in one genome give 5."""
    table = GeneCountTable(["G0"])
    coverage = build_coverage([hit("A", 0, 100)])

    aggregate_genome(
        [
            gene_at("A", "g2", "p2", 10, 12),
            gene_at("A", "g2", "p2", 50, 53),
        ],
        coverage, table, 0, MissingAccessionTracker("G0"), policy,
    )

    assert table.get(Gene(name="g2", product="p2")) == [5]


@pytest.mark.parametrize("policy", POLICIES)
def test_missing_accession_contributes_zero_and_warns_once(policy):
    table = GeneCountTable(["G0"])
    coverage = build_coverage([hit("A", 0, 10)])
    tracker = MissingAccessionTracker("G0")

    with capture_logs() as logs:
        summary = aggregate_genome(
            [
                gene_at("B", "g1", "p1", 0, 5),
                gene_at("B", "g2", "p2", 5, 9),
                gene_at("B", "g1", "p1", 2, 3),
                gene_at("A", "g3", "p3", 0, 4),
            ],
            coverage, table, 0, tracker, policy,
        )

    assert len(missing_events(logs)) == 1
    assert table.get(Gene(name="g1", product="p1")) == [0]
    assert table.get(Gene(name="g2", product="p2")) == [0]
    assert table.get(Gene(name="g3", product="p3")) == [4]
    assert summary.missing_accessions == 1
    assert summary.annotation_count == 4
    assert summary.gene_count == 3


def test_accession_with_only_empty_hits_is_not_missing():
    table = GeneCountTable(["G0"])
    coverage = build_coverage([hit("A", 3, 3)])

    with capture_logs() as logs:
        aggregate_genome(
            [gene_at("A", "g1", "p1", 0, 5)],
            coverage, table, 0, MissingAccessionTracker("G0"),
        )

    assert missing_events(logs) == []
    assert table.get(Gene(name="g1", product="p1")) == [0]


# ============================================================================
# Runner
# ============================================================================

def _two_genomes():
    shared = Gene(name="g1", product="prod1")
    g0 = Genome(
        name="G0",
        alignments=[hit("A", 0, 5)],
        annotations=[AnnotationRecord(accession="A", gene=shared, start=2, end=4)],
    )
    g1 = Genome(
        name="G1",
        alignments=[hit("C", 0, 10)],
        annotations=[
            AnnotationRecord(accession="X", gene=shared, start=0, end=8),
            gene_at("B", "g9", "prod9", 0, 3),
            gene_at("B", "g9", "prod9", 4, 6),
        ],
    )
    return g0, g1


@pytest.mark.parametrize("representation", REPRESENTATIONS)
def test_same_gene_merges_across_genomes_and_accessions(representation):
    g0, g1 = _two_genomes()
    g1.annotations = [AnnotationRecord(accession="C", gene=Gene(name="g1", product="prod1"), start=0, end=8)]

    table = count_gene_hits([g0, g1], representation=representation)

    assert len(table) == 1
    assert table.get(Gene(name="g1", product="prod1")) == [2, 8]


def test_missing_accession_in_second_genome():
    """An accession never hit in G1 contributes 0 there, one warning, no crash."""
    g0, g1 = _two_genomes()

    with capture_logs() as logs:
        table = count_gene_hits([g0, g1])

    events = missing_events(logs)
    assert sorted(e["accession"] for e in events) == ["B", "X"]
    assert all(e["genome"] == "G1" for e in events)
    assert table.get(Gene(name="g1", product="prod1")) == [2, 0]
    assert table.get(Gene(name="g9", product="prod9")) == [0, 0]


def test_missing_tracking_is_scoped_per_genome():
    """The same missing accession is reported again in a later genome."""
    genomes = [
        Genome(name=f"G{i}", alignments=[], annotations=[gene_at("B", "g", "p", 0, 1)])
        for i in range(3)
    ]

    with capture_logs() as logs:
        count_gene_hits(genomes)

    assert [e["genome"] for e in missing_events(logs)] == ["G0", "G1", "G2"]


def test_every_row_has_genome_count_entries():
    g0, g1 = _two_genomes()
    g2 = Genome(name="G2", alignments=[], annotations=[])

    table = count_gene_hits([g0, g1, g2])

    assert table.genome_names == ["G0", "G1", "G2"]
    for _, row in table.rows():
        assert len(row) == 3
        assert row[2] == 0


def test_runner_accepts_generator_of_genomes():
    g0, g1 = _two_genomes()

    table = count_gene_hits(genome for genome in (g0, g1))

    assert table.genome_count == 2


def test_runner_allows_repeated_genome_names():
    shared = Gene(name="g1", product="prod1")
    genomes = [
        Genome(
            name="S",
            alignments=[hit("A", 0, end)],
            annotations=[AnnotationRecord(accession="A", gene=shared, start=0, end=10)],
        )
        for end in (3, 7)
    ]

    table = count_gene_hits(genomes)

    assert table.genome_names == ["S", "S"]
    assert table.get(shared) == [3, 7]


def test_runner_records_provenance_steps():
    g0, g1 = _two_genomes()
    provenance = ProvenanceTracker("0.1.0", PipelineConfig())

    count_gene_hits([g0, g1], provenance=provenance)

    steps = provenance.get_steps()
    assert [s["details"]["genome"] for s in steps] == ["G0", "G1"]
    assert steps[1]["details"]["missing_accessions"] == ["B", "X"]
    assert steps[0]["details"]["total_count"] == 2


def test_parse_failure_aborts_run(tmp_path):
    """An upstream failure propagates out of the run."""
    def failing_alignments():
        yield hit("A", 0, 5)
        raise ParseError(tmp_path / "bad.blast", 2, "BLAST", "expected 12 tab-separated columns, found 3")

    g0, _ = _two_genomes()
    bad = Genome(name="bad", alignments=failing_alignments(), annotations=[])

    with capture_logs() as logs:
        with pytest.raises(ParseError, match="bad.blast"):
            count_gene_hits([g0, bad])

    failed = [e for e in logs if e["event"] == "genome_failed"]
    assert failed[0]["genome"] == "bad"
