"""walkerevo – continuous evolution of legged walkers."""
