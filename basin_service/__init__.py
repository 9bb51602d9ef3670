"""Basin Term Service: z1p0/z2p5 basin depth resolution for seismic site amplification."""

__version__ = "1.0.0"
