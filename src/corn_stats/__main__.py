from corn_stats.cli import run

if __name__ == "__main__":
    run()
