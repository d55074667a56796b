from disbot.clients.disc import run

run()
