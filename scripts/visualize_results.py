#!/usr/bin/env python3
"""
Visualization Script for the Connes distance analysis
=====================================================

Generates figures for a Markov chain:
1. Connes distance heatmap
2. Spectrum of the symmetrized generator
3. Stationary distribution
4. Classical MDS embedding of the states

Usage:
    python scripts/visualize_results.py [--input P.json] [--output-dir figures]
"""

import sys
import os
import argparse
import numpy as np

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from connes import DistanceOptimizer, SpectralTriple
from numerics.analysis import analyze_triple
from numerics.chains import load_transition, preset_transition
from numerics.embedding import classical_mds, normalize_to_unit_box


def setup_style():
    """Configure matplotlib for publication-quality figures."""
    plt.rcParams.update({
        'figure.figsize': (10, 7),
        'font.size': 12,
        'font.family': 'serif',
        'axes.labelsize': 14,
        'axes.titlesize': 14,
        'legend.fontsize': 11,
        'xtick.labelsize': 11,
        'ytick.labelsize': 11,
        'lines.linewidth': 2,
        'axes.grid': True,
        'grid.alpha': 0.3,
        'figure.dpi': 150,
        'savefig.dpi': 300,
        'savefig.bbox': 'tight'
    })


def plot_distance_heatmap(distances, output_path):
    """
    Heatmap of the Connes distance matrix with values annotated.
    """
    n = distances.shape[0]
    fig, ax = plt.subplots(figsize=(8, 7))

    im = ax.imshow(distances, cmap='viridis', origin='upper')
    fig.colorbar(im, ax=ax, label=r'$d_D(i, j)$')

    if n <= 12:
        vmax = distances.max() if distances.size else 0.0
        for i in range(n):
            for j in range(n):
                color = 'white' if distances[i, j] < 0.5 * vmax else 'black'
                ax.text(j, i, f"{distances[i, j]:.3g}", ha='center', va='center',
                        fontsize=9, color=color)

    ax.set_xticks(range(n))
    ax.set_yticks(range(n))
    ax.set_xlabel('State j')
    ax.set_ylabel('State i')
    ax.set_title('Connes Distance Between States', fontweight='bold')
    ax.grid(False)

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
    print(f"  Saved: {output_path}")


def plot_spectrum(eigenvalues, conditioning, output_path):
    """
    Spectrum of -L_sym with the spectral gap and epsilon marked.
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    k = np.arange(len(eigenvalues))
    ax.plot(k, eigenvalues, 'o-', color='#2E86AB', markersize=10,
            markeredgecolor='white', markeredgewidth=2, label=r'$\lambda_k(-L_{\mathrm{sym}})$')
    ax.axhline(conditioning['epsilon'], color='#F24236', linestyle='--',
               label=rf"$\varepsilon = {conditioning['epsilon']:.1e}$")

    ill = conditioning['ill_conditioned']
    status = "✗ ILL-CONDITIONED" if ill else "✓ WELL-CONDITIONED"
    color = '#F24236' if ill else '#2CA02C'
    ax.text(0.02, 0.95, f"{status}\nGap: {conditioning['spectral_gap']:.3e}",
            transform=ax.transAxes, ha='left', va='top',
            fontsize=12, fontweight='bold', color=color,
            bbox=dict(boxstyle='round,pad=0.5', facecolor='white',
                      edgecolor=color, linewidth=2))

    ax.set_xlabel('Index k')
    ax.set_ylabel('Eigenvalue')
    ax.set_title('Spectrum of the Symmetrized Generator', fontweight='bold')
    ax.legend(loc='lower right', framealpha=0.95)

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
    print(f"  Saved: {output_path}")


def plot_stationary(stationary, output_path):
    """Bar chart of the stationary distribution."""
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.bar(np.arange(len(stationary)), stationary, color='#2E86AB', alpha=0.8)
    ax.set_xlabel('State')
    ax.set_ylabel(r'$\pi_i$')
    ax.set_title('Stationary Distribution', fontweight='bold')

    plt.tight_layout()
    plt.savefig(output_path)
    plt.close()
    print(f"  Saved: {output_path}")


def plot_embedding(distances, output_path):
    """
    States placed in 3D by classical MDS of the Connes distances.
    """
    coords, _, _, _ = normalize_to_unit_box(classical_mds(distances, dims=3))

    fig = plt.figure(figsize=(9, 8))
    ax = fig.add_subplot(111, projection='3d')
    ax.scatter(coords[:, 0], coords[:, 1], coords[:, 2], s=120,
               c=np.arange(len(coords)), cmap='viridis', edgecolors='black')
    for k, (x, y, z) in enumerate(coords):
        ax.text(x, y, z, f"  {k}", fontsize=11)

    ax.set_title('MDS Embedding of Connes Distances', fontweight='bold')

    plt.savefig(output_path)
    plt.close()
    print(f"  Saved: {output_path}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate visualization figures')
    parser.add_argument('--input', '-i', default=None,
                        help='Transition matrix file; default: 3-state preset')
    parser.add_argument('--epsilon', '-e', type=float, default=1e-3,
                        help='Regularization parameter')
    parser.add_argument('--output-dir', '-o', default='figures',
                        help='Output directory for figures')
    parser.add_argument('--seed', '-s', type=int, default=42,
                        help='Optimizer seed')
    args = parser.parse_args(argv)

    setup_style()

    print("=" * 60)
    print("Connes Distance - Visualization")
    print("=" * 60)

    os.makedirs(args.output_dir, exist_ok=True)
    print(f"Output directory: {args.output_dir}")

    print("\nAnalyzing chain...")
    transition = load_transition(args.input) if args.input else preset_transition()
    triple = SpectralTriple.from_transition(transition, args.epsilon)
    report = analyze_triple(triple, DistanceOptimizer(seed=args.seed))
    print(f"  States: {report['n']}")

    print("\nGenerating figures...")

    plot_distance_heatmap(report['distances'],
                          os.path.join(args.output_dir, '01_distance_heatmap.png'))

    plot_spectrum(report['eigenvalues'], report['conditioning'],
                  os.path.join(args.output_dir, '02_spectrum.png'))

    plot_stationary(report['stationary'],
                    os.path.join(args.output_dir, '03_stationary.png'))

    plot_embedding(report['distances'],
                   os.path.join(args.output_dir, '04_mds_embedding.png'))

    print("\n" + "=" * 60)
    print("VISUALIZATION COMPLETE")
    print("=" * 60)
    print(f"\nGenerated 4 figures in: {args.output_dir}/")


if __name__ == '__main__':
    main()
