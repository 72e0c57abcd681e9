"""
Core of the etherna dev stack: the container lifecycle supervisor.

It spawns the service containers, watches their output until each one is
ready or failed, sequences the storage chain and tears every started
process down on shutdown.

Launch sequence of one service:
    - stop a container left over with the same name
    - ensure host files, network and volumes
    - docker run --rm --name %name% %args% %image% %cmd%
    - classify stdout/stderr lines against the service readiness rule

All container commands go through the container CLI, described in
docker_interface:
> docker run --rm --name %name% ...
> docker volume create %name%
> docker network create %name%
> docker ps -a --filter name=%name%
> docker stop %name%
> docker exec %name% update-ca-certificates
"""
