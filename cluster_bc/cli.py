#!/usr/bin/env python3
"""
Command line entry point: cluster an edge list with the parallel Louvain evaluator.
"""
import sys

import click
import numpy as np
import pandas as pd

from .config import LouvainConfig
from .core_utilities import TimingStats
from .louvain_evaluator import LouvainEvaluator, LouvainObserver, VerboseObserver
from .louvain_graph import LouvainGraph


def load_edge_list(path):
    """
    Read a whitespace separated ``src dst [weight]`` edge list.
    Lines starting with '#' are ignored; a missing weight column means 1.0.
    """
    try:
        df = pd.read_csv(path, sep=r"\s+", comment="#", header=None,
                         names=["src", "dst", "weight"], index_col=False, engine="python")
    except pd.errors.EmptyDataError:
        df = pd.DataFrame(columns=["src", "dst", "weight"])
    if df.empty:
        return LouvainGraph.from_edges(np.empty(0, np.int64), np.empty(0, np.int64))
    if df[["src", "dst"]].isna().any().any():
        raise ValueError(f"Every edge in {path} needs a source and a target")
    weights = df["weight"].fillna(1.0).to_numpy(dtype=np.float64)
    return LouvainGraph.from_edges(df["src"].to_numpy(dtype=np.int64),
                                   df["dst"].to_numpy(dtype=np.int64),
                                   weights)


@click.command()
@click.argument('edge_list', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help="Write 'vertex community' lines here instead of stdout.")
@click.option('--precision', type=float, default=0.01, show_default=True,
              help="Minimum modularity gain for another local pass.")
@click.option('--parallelism', type=int, default=4, show_default=True,
              help="Independent attempts per level.")
@click.option('--seed', type=int, default=0, show_default=True,
              help="Seed for the visiting order of the extra attempts.")
@click.option('--verbose/--quiet', default=False,
              help="Print level banners while clustering.")
@click.option('--timing/--no-timing', default=False,
              help="Print per-level timing statistics at the end.")
def main(edge_list, output, precision, parallelism, seed, verbose, timing):
    """Cluster EDGE_LIST and print the community of every vertex."""
    try:
        config = LouvainConfig(precision=precision, parallelism=parallelism,
                               verbose=verbose, seed=seed)
    except ValueError as e:
        raise click.BadParameter(str(e))

    graph = load_edge_list(edge_list)
    timing_stats = TimingStats()
    observer = VerboseObserver(timing_stats) if (verbose or timing) else LouvainObserver()
    result = LouvainEvaluator(config, observer=observer).evaluate(graph)

    lines = [f"{vertex} {comm}" for vertex, comm in enumerate(result.membership.tolist())]
    if output:
        with open(output, 'w') as f:
            f.write("\n".join(lines) + ("\n" if lines else ""))
    else:
        for line in lines:
            click.echo(line)

    click.echo(f"# {graph.n_nodes} vertices, {result.n_communities} communities, "
               f"{result.levels} levels, modularity {result.modularity:.6f}",
               err=output is None)
    if timing:
        click.echo(timing_stats.level_breakdown("louvain"), err=True)
        if result.levels:
            per_level = timing_stats.get_operation_total("louvain") / result.levels
            click.echo(f"  average per level: {per_level:.3f}s", err=True)


if __name__ == '__main__':
    sys.exit(main())
