"""HTTP front end: upload a batch of audio files, download transcripts.zip."""
