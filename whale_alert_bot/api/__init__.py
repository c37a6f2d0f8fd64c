"""HTTP login boundary for the web and mini-app clients."""
