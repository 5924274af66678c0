"""Path discovery: bounded path strings, landmarks, executable and prefix search."""
