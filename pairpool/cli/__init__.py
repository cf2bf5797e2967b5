"""PairPool command-line tools."""
