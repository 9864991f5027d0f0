"""
NDVI and band math over reflectance cubes.

``ndvi`` is the per-pixel transform used by the stacking pipeline. The
``bandmath`` accessor evaluates arbitrary expressions on a (band, y, x)
xarray cube using band names or index references (b0, b1, b2, ...).

Usage:
    >>> round(ndvi(0.5, 0.1), 3)
    0.667
    >>> scene.data.bandmath.ndvi()
    >>> scene.data.bandmath("(nir - swir_1) / (nir + swir_1)")
"""

from typing import Any

import numpy as np
import xarray as xr

from ndviseries.core.exceptions import ShapeMismatchError


def _ndvi_values(nir, red):
    nir = np.asarray(nir, dtype=np.float64)
    red = np.asarray(red, dtype=np.float64)
    denom = nir + red
    with np.errstate(divide="ignore", invalid="ignore"):
        result = (nir - red) / denom
    # x / 0 gives inf when nir == -red != 0
    return np.where(denom == 0, np.nan, result)


def ndvi(nir, red):
    """
    Normalized Difference Vegetation Index, (nir - red) / (nir + red).

    Applied independently per pixel. Where nir + red == 0 the result is NaN
    for that pixel only; NaN inputs propagate.

    Args:
        nir: Near-infrared reflectance (scalar, ndarray or xr.DataArray)
        red: Red reflectance of the same shape

    Returns:
        float for scalar input, otherwise an array of the input type

    Raises:
        ShapeMismatchError: If array inputs differ in shape
    """
    if isinstance(nir, xr.DataArray) or isinstance(red, xr.DataArray):
        result = xr.apply_ufunc(_ndvi_values, nir, red)
        result.name = "ndvi"
        return result

    nir_arr = np.asarray(nir)
    red_arr = np.asarray(red)
    if nir_arr.shape != red_arr.shape:
        raise ShapeMismatchError(
            f"NIR and red differ in shape: {nir_arr.shape} vs {red_arr.shape}"
        )
    result = _ndvi_values(nir_arr, red_arr)
    if result.ndim == 0:
        return float(result)
    return result


@xr.register_dataarray_accessor("bandmath")
class BandMathAccessor:
    """
    Band math on a (band, y, x) reflectance cube.

    ``ndvi_layer`` derives every stacked layer through ``.ndvi()``. Layers
    are addressed by position (b0, b1, ...) or, when the cube carries band
    coordinates as loaded scenes do, by band name.
    """

    def __init__(self, da: xr.DataArray):
        if "band" not in da.dims:
            raise ValueError(f"DataArray has no 'band' dimension (dims: {da.dims})")
        self._da = da

    @property
    def bands(self) -> dict[str, Any]:
        """Positional reference -> band name (or index for unnamed cubes)."""
        if "band" in self._da.coords:
            return {f"b{i}": name for i, name in enumerate(self._da.coords["band"].values)}
        return {f"b{i}": i for i in range(self._da.sizes["band"])}

    def band(self, ref: str) -> xr.DataArray:
        """One (y, x) layer by positional reference or band name."""
        refs = self.bands
        if ref in refs:
            return self._da.isel(band=int(ref[1:]), drop=True)
        if "band" in self._da.coords and ref in refs.values():
            return self._da.sel(band=ref, drop=True)
        raise KeyError(f"No band {ref!r} (available: {', '.join(map(str, refs.values()))})")

    def ndvi(self, nir: str = "nir", red: str = "red") -> xr.DataArray:
        """NDVI from two bands of the cube."""
        return ndvi(self.band(nir), self.band(red))

    def __call__(self, expr: str) -> xr.DataArray:
        """
        Evaluate an expression over the cube's bands.

        numpy is available as ``np`` and the NaN-safe transform as ``ndvi``.

        Examples:
            >>> cube.bandmath("(b3 - b2) / (b3 + b2)")
            >>> cube.bandmath("ndvi(nir, red)")
            >>> cube.bandmath("(nir - swir_1) / (nir + swir_1)")
        """
        names: dict[str, Any] = {"np": np, "ndvi": ndvi}
        for ref, name in self.bands.items():
            layer = self.band(ref)
            names[ref] = layer
            if isinstance(name, str):
                names[name] = layer

        result = eval(expr, {"__builtins__": {}}, names)
        if isinstance(result, xr.DataArray):
            result.name = "bandmath"
        return result

    def __repr__(self) -> str:
        refs = "\n".join(f"  {ref}: {name}" for ref, name in self.bands.items())
        return f"<BandMath>\n{refs}"
