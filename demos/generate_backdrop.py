"""
Depth Map Backdrop Demo

This script demonstrates using depthmesh to turn a depth map into a
backdrop mesh, equivalent to pressing "Generate Mesh" on a depth-map
backdrop component in a game engine.

Usage:
    python generate_backdrop.py depth.pfm backdrop.ply
    python generate_backdrop.py depth.png backdrop.glb --subdivisions 8 --max-depth 0.9

The script will:
1. Load the depth source (.pfm float-map, or any image Pillow can read)
2. Resample it to a 2^subdivisions grid
3. Box blur the depths
4. Build the mesh, culling triangles outside the depth band
5. Save the mesh with recomputed normals
"""

import argparse
import logging
from pathlib import Path

from depthmesh import DepthMeshBuilder, MeshConfig
from depthmesh.io import TrimeshTarget


def parse_args():
    parser = argparse.ArgumentParser(description="Build a backdrop mesh from a depth map")
    parser.add_argument("input", type=Path, help="Depth source (.pfm or image)")
    parser.add_argument("output", type=Path, help="Output mesh (.ply, .obj, .glb)")
    parser.add_argument("--blur-range", type=int, default=1)
    parser.add_argument("--blur-iterations", type=int, default=1)
    parser.add_argument("--min-depth", type=float, default=0.0)
    parser.add_argument("--max-depth", type=float, default=1.0)
    parser.add_argument("--subdivisions", type=int, default=6)
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = MeshConfig(
        box_blur_range=args.blur_range,
        box_blur_iterations=args.blur_iterations,
        min_depth=args.min_depth,
        max_depth=args.max_depth,
        subdivisions=args.subdivisions,
    )

    builder = DepthMeshBuilder(config, target=TrimeshTarget(args.output))
    if args.input.suffix.lower() == ".pfm":
        builder.load_pfm(args.input)
    else:
        builder.load_image(args.input)

    print(f"Building backdrop mesh from {args.input}...")
    print(f"  {config}")

    buffers = builder.generate()

    print(f"\nMesh generated successfully:")
    print(f"  Number of vertices: {buffers.n_vertices}")
    print(f"  Number of triangles: {buffers.n_triangles}")
    print(f"\nMesh saved to: {args.output}")

    return buffers


if __name__ == "__main__":
    main()
