"""HTTP and command-line clients for the pdfqa pipeline."""
