from dmarc_digest.app import run

run()
