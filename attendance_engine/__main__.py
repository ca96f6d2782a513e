from attendance_engine.cli import main

main()
