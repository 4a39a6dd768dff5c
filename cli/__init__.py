# cli - ec2cache 명령줄 인터페이스
