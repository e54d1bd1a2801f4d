"""
Common JAX initialization.

JAX is configured once at import time. Modules that need JAX import it from here
so that x64 precision is always on before the first array is created:

    from gsfm.utils.jax_init import jax, jnp
"""

from __future__ import annotations

import os

# Must be set before importing JAX. Residual blocks are tiny, so CPU is the default.
os.environ.setdefault("JAX_PLATFORMS", "cpu")

import jax
import jax.numpy as jnp

# Focal lengths enter the Fetzer residuals squared; float32 loses the derivative.
jax.config.update("jax_enable_x64", True)

__all__ = ["jax", "jnp"]
