"""API routes for BandDesigner."""
