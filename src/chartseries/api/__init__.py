"""HTTP surface exposing the series pipeline as a JSON API."""
