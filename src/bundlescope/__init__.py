"""bundlescope - dependency graph analysis for esbuild metafiles."""

__version__ = "0.1.0"
