"""Optional pygame viewer for the photon-absorption model."""
