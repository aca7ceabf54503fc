def main():
    from .packager import packager

    packager()


if __name__ == "__main__":
    main()
