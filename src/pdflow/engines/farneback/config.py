"""Configuration for the Farneback reference engine."""

from pydantic import BaseModel, Field


class FarnebackConfig(BaseModel):
    depth_scale: float = Field(1.0 / 5000.0, description="Metres per raw depth unit (5000 units = 1 m)")
    fov_h_deg: float = Field(62.5, description="Horizontal field of view in degrees")
    fov_v_deg: float = Field(48.5, description="Vertical field of view in degrees")
    pyr_scale: float = Field(0.5, description="Image scale between pyramid levels")
    levels: int = Field(3, description="Number of pyramid levels")
    winsize: int = Field(15, description="Averaging window size")
    iterations: int = Field(3, description="Iterations per pyramid level")
    poly_n: int = Field(5, description="Pixel neighbourhood for polynomial expansion")
    poly_sigma: float = Field(1.2, description="Gaussian sigma for polynomial expansion")
